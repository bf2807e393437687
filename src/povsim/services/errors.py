"""Service-layer exceptions."""


class ContentError(Exception):
    """Raised when authored content cannot be used at runtime."""


class SlideNotFoundError(ContentError):
    """Raised when navigation targets a slide id that is not in the content table."""

    def __init__(self, slide_id: str) -> None:
        super().__init__(f'Slide "{slide_id}" not found.')
        self.slide_id = slide_id
