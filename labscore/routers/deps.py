from fastapi import Request

from labscore.services.ai_analyzer import AIHealthAnalyzer


def get_health_analyzer(request: Request) -> AIHealthAnalyzer:
    return request.app.state.health_analyzer
