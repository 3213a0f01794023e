from app.ai.analyzer import ContentAnalyzer
from app.ai.analyzer_ai import DelegatedAIAnalyzer
from app.ai.analyzer_heuristic import HeuristicAnalyzer

__all__ = ["ContentAnalyzer", "DelegatedAIAnalyzer", "HeuristicAnalyzer"]
