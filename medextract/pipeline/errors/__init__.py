from medextract.pipeline.errors.codes import ErrorCode, ErrorSpec, make_error

__all__ = ["ErrorCode", "ErrorSpec", "make_error"]
