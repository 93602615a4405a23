"""Program metadata."""

__app_name__ = "send-mail"
__version__ = "1.0.0"
__description__ = "Compose and send a single email over SMTP, optionally with STARTTLS and an attachment."
__license_type__ = "MIT"

__all__ = [
    "__app_name__",
    "__description__",
    "__license_type__",
    "__version__",
]
