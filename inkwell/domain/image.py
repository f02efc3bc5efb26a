"""Image domain models."""

from pydantic import BaseModel


class ImageFile(BaseModel):
    """An uploaded image as listed to the editor.

    Attributes:
        name: File name inside the images folder, upload timestamp prefix included.
        url: Path the image is served from.
    """

    name: str
    url: str
