"""
Errors — Failure taxonomy for the segment export pipeline.

Every failure is fatal to the invocation. Each class carries the pipeline
phase it came from so the entry point can render it without inspecting
the message text:

  config    ConfigError            missing domain/token, bad fetch parameters
  request   RequestTimeoutError    deadline elapsed before a response arrived
  request   TransportError         connection/TLS failure before the deadline
  request   HttpError              non-2xx status (carries status + raw body)
  decode    DecodeError            body is not the expected JSON shape
  graphql   GraphQLError           well-formed response with an errors array
  export    ExportCancelledError   deadline elapsed between CSV rows
  export    ExportWriteError       I/O or encoding failure writing the CSV
"""

from typing import List


class SegmentExportError(Exception):
    """Base class for all pipeline failures."""

    phase = "unknown"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(SegmentExportError):
    phase = "config"


class RequestTimeoutError(SegmentExportError):
    phase = "request"


class TransportError(SegmentExportError):
    phase = "request"


class HttpError(SegmentExportError):
    """Non-success HTTP status. The body is kept verbatim for diagnostics."""

    phase = "request"

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DecodeError(SegmentExportError):
    phase = "decode"


class GraphQLError(SegmentExportError):
    """The API answered but reported application-level errors."""

    phase = "graphql"

    def __init__(self, messages: List[str]):
        super().__init__(f"GraphQL errors: {'; '.join(messages)}")
        self.messages = list(messages)


class ExportCancelledError(SegmentExportError):
    phase = "export"


class ExportWriteError(SegmentExportError):
    phase = "export"
