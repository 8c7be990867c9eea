from enum import Enum


class ContentKind(str, Enum):
    """The four kinds of dashboard content. The last three share one table."""

    PROMOTION = "promotion"
    SEASONAL = "seasonal"
    INFO = "info"
    ALERT = "alert"

    @property
    def is_announcement(self) -> bool:
        return self != ContentKind.PROMOTION

    @property
    def family(self) -> str:
        return "announcement" if self.is_announcement else "promotion"
