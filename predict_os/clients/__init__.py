"""Pure API clients. No analysis or sizing logic lives here."""
