from src.error_handler import (
    ErrorHandler,
    UpstreamSubmissionError,
    ValidationError,
)


def test_handle_exception_returns_fallback_for_unexpected_errors():
    eh = ErrorHandler()
    out = eh.handle_exception(Exception("boom"), context={"k": "v"})
    assert out == {"errorMessage": "STK push failed. Please try again."}


def test_handle_exception_forwards_client_message():
    eh = ErrorHandler()
    out = eh.handle_exception(UpstreamSubmissionError("Invalid Access Token"))
    assert out == {"errorMessage": "Invalid Access Token"}


def test_validation_error_is_a_client_error():
    exc = ValidationError("payerPhone and amount are required")
    assert exc.status_code == 400
    assert UpstreamSubmissionError("x").status_code == 500
