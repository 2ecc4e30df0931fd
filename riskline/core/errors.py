class PipelineError(Exception):
    """파이프라인 예외의 기본 클래스"""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class AssessmentError(PipelineError):
    """평가 실행 단계 실패 시 발생"""

    def __init__(self, code: str, stage: str, message: str) -> None:
        super().__init__(code, f"{stage}: {message}")
        self.stage = stage
