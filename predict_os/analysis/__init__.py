from .base import AnalysisProvider, ProviderName, parse_verdict
from .gateway import AnalysisGateway, AnalysisResult, FailoverPolicy, RetryPolicy
from .prompts import build_analysis_prompt
from .providers import create_provider

__all__ = [
    "AnalysisProvider",
    "ProviderName",
    "parse_verdict",
    "AnalysisGateway",
    "AnalysisResult",
    "FailoverPolicy",
    "RetryPolicy",
    "build_analysis_prompt",
    "create_provider",
]
