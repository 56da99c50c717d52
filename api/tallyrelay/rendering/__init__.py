"""Base types for turning Tally submissions into email documents."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RenderedField:
    """One answer rendered for email."""
    html: str  # safe HTML fragment
    text: str  # raw plain-text value


@dataclass(frozen=True)
class RenderedDocument:
    """The email produced for a single submission."""
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class DocumentOptions:
    """Display options for the document builder."""
    subject_prefix: str = "[Tally Feedback]"
    timezone: str = "UTC"
    date_format: str = "%B %d, %Y"
    time_format: str = "%I:%M %p"
    show_ids: bool = False
    skip_option_checkboxes: bool = True
    sender_name: str = ""

    @classmethod
    def from_settings(cls, settings) -> "DocumentOptions":
        return cls(
            subject_prefix=settings.subject_prefix,
            timezone=settings.timezone,
            date_format=settings.date_format,
            time_format=settings.time_format,
            show_ids=settings.show_submission_ids,
            skip_option_checkboxes=settings.skip_option_checkboxes,
            sender_name=settings.sender_name or settings.app_name,
        )
