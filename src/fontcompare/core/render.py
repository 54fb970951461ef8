"""Rendering compiled pages into labelled output pages.

Compiled pages are decoded with Pillow, flattened onto white and paired
with the variant label. Optionally all pages of a variant are stacked into
a single image, separated by a thin black gap.
"""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from fontcompare.domain.page import CompiledPage, RenderedPage, pixels_to_points
from fontcompare.exceptions import RenderError

BACKGROUND = (255, 255, 255)
GAP_COLOR = (0, 0, 0)
GAP_POINTS = 4.0


def _decode(page: CompiledPage, label: str) -> Image.Image:
    try:
        with Image.open(BytesIO(page.png)) as image:
            image.load()
            if image.mode == "RGB":
                return image.copy()
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise RenderError(label, f"page {page.index + 1}: {e}") from e

    flat = Image.new("RGB", rgba.size, BACKGROUND)
    flat.paste(rgba, mask=rgba.getchannel("A"))
    rgba.close()
    return flat


def _encode(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=False)
    return buffer.getvalue()


def merge_images(images: list[Image.Image], gap: int) -> Image.Image:
    """Stack images vertically with a gap between them.

    Args:
        images: Page images in order
        gap: Gap height in pixels

    Returns:
        Image as wide as the widest page
    """
    width = max(image.width for image in images)
    height = sum(image.height for image in images) + gap * (len(images) - 1)

    merged = Image.new("RGB", (width, height), GAP_COLOR)
    y = 0
    for image in images:
        if image.width < width:
            merged.paste(Image.new("RGB", (width, image.height), BACKGROUND), (0, y))
        merged.paste(image, (0, y))
        y += image.height + gap
    return merged


def render(
    pages: list[CompiledPage],
    ppi: float,
    label: str,
    family: str | None = None,
    merge: bool = False,
) -> list[RenderedPage]:
    """Turn compiled pages into labelled output pages.

    Args:
        pages: Compiled pages of one variant
        ppi: Resolution the pages were rasterized at
        label: Label of the variant
        family: Family of the variant (None for the baseline pass)
        merge: Stack all pages into a single output page

    Returns:
        Rendered pages in page order

    Raises:
        RenderError: If a page cannot be decoded
    """
    if not pages:
        raise RenderError(label, "no pages to render")

    images = [_decode(page, label) for page in pages]

    if merge and len(images) > 1:
        gap = max(1, round(GAP_POINTS / 72.0 * ppi))
        images = [merge_images(images, gap)]

    rendered = []
    for index, image in enumerate(images):
        rendered.append(
            RenderedPage(
                image=_encode(image),
                width=pixels_to_points(image.width, ppi),
                height=pixels_to_points(image.height, ppi),
                pixel_width=image.width,
                pixel_height=image.height,
                label=label,
                family=family,
                page_index=index,
            )
        )
        image.close()
    return rendered
