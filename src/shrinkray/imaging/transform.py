"""Multi-step transform: several edits on one decoded raster, one encode."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image, ImageEnhance, ImageFilter

from shrinkray.errors import collaborator
from shrinkray.imaging.geometry import DEFAULT_FILTER, plan_resize
from shrinkray.imaging.resize import apply_resize

if TYPE_CHECKING:
    from shrinkray.imaging.options import TransformOptions

# Clockwise rotation -> Pillow transpose (Pillow rotates counter-clockwise).
_ROTATIONS: dict[int, Image.Transpose] = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def _grayscale(image: Image.Image) -> Image.Image:
    luma = image.convert("L")
    if image.mode == "RGBA":
        return Image.merge("RGBA", (luma, luma, luma, image.getchannel("A")))
    return luma.convert("RGB")


def apply_transform(image: Image.Image, options: TransformOptions) -> Image.Image:
    if options.resize is not None:
        resize = options.resize
        plan = plan_resize(image.width, image.height, resize.width, resize.height, resize.fit)
        image = apply_resize(image, plan, resize.filter or DEFAULT_FILTER, resize.background)

    with collaborator("Transform failed"):
        if options.rotate is not None and options.rotate % 360:
            image = image.transpose(_ROTATIONS[options.rotate % 360])
        if options.flip_horizontal:
            image = image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
        if options.flip_vertical:
            image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        if options.grayscale:
            image = _grayscale(image)
        if options.brightness is not None:
            image = ImageEnhance.Brightness(image).enhance(options.brightness)
        if options.contrast is not None:
            image = ImageEnhance.Contrast(image).enhance(options.contrast)
        if options.blur is not None:
            image = image.filter(ImageFilter.GaussianBlur(radius=options.blur))
        if options.sharpen is not None:
            image = image.filter(ImageFilter.UnsharpMask(radius=options.sharpen))
    return image
