"""OCR enhancement for pages rendered by the library fallback.

GraphicsMagick renders pages with ``-colorspace Gray -contrast-stretch
-sharpen -normalize``. Pages rendered through pdf2image skip those
arguments, so the same steps are reproduced here with OpenCV to keep the
OCR input comparable whichever strategy produced it.
"""

import re

import cv2
import numpy as np

from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_PERCENT_PAIR = re.compile(r"^\s*([\d.]+)%?(?:x([\d.]+)%?)?\s*$")
_RADIUS_SIGMA = re.compile(r"^\s*([\d.]+)(?:x([\d.]+))?\s*$")


def parse_contrast_stretch(value: str) -> tuple[float, float]:
    """Parse a GraphicsMagick ``-contrast-stretch`` argument.

    Args:
        value: Value such as ``"0.35%x0.35%"`` (black point x white point).

    Returns:
        Tuple of (black_percent, white_percent).

    Raises:
        ValueError: If the argument cannot be parsed.
    """
    match = _PERCENT_PAIR.match(value)
    if not match:
        raise ValueError(f"Invalid contrast stretch: {value!r}")
    black = float(match.group(1))
    white = float(match.group(2)) if match.group(2) else black
    return black, white


def parse_sharpen(value: str) -> float:
    """Parse a GraphicsMagick ``-sharpen`` argument and return its sigma.

    Args:
        value: Value such as ``"0x1.0"`` (radius x sigma).

    Raises:
        ValueError: If the argument cannot be parsed.
    """
    match = _RADIUS_SIGMA.match(value)
    if not match:
        raise ValueError(f"Invalid sharpen geometry: {value!r}")
    return float(match.group(2) or match.group(1))


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an RGB render to grayscale, passing grayscale through."""
    if len(image.shape) == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def contrast_stretch(
    gray: np.ndarray, black_percent: float, white_percent: float
) -> np.ndarray:
    """Clip the darkest and lightest pixel percentiles and rescale to 0-255.

    Args:
        gray: Grayscale image.
        black_percent: Percentage of pixels saturated to black.
        white_percent: Percentage of pixels saturated to white.

    Returns:
        Stretched grayscale image.
    """
    low = float(np.percentile(gray, black_percent))
    high = float(np.percentile(gray, 100.0 - white_percent))
    if high <= low:
        return gray
    stretched = (gray.astype(np.float32) - low) * (255.0 / (high - low))
    return np.clip(stretched, 0, 255).astype(np.uint8)


def sharpen(gray: np.ndarray, sigma: float) -> np.ndarray:
    """Unsharp-mask the image with a Gaussian of the given sigma."""
    if sigma <= 0:
        return gray
    blurred = cv2.GaussianBlur(gray, (0, 0), sigma)
    return cv2.addWeighted(gray, 1.5, blurred, -0.5, 0)


def enhance_for_ocr(
    image: np.ndarray,
    contrast: str = "0.35%x0.35%",
    sharpen_geometry: str = "0x1.0",
) -> np.ndarray:
    """Apply the GraphicsMagick-equivalent enhancement chain.

    Args:
        image: Rendered page (RGB or grayscale).
        contrast: ``-contrast-stretch`` style argument.
        sharpen_geometry: ``-sharpen`` style argument.

    Returns:
        Enhanced 8-bit grayscale image.
    """
    black, white = parse_contrast_stretch(contrast)
    gray = to_gray(image)
    result = contrast_stretch(gray, black, white)
    result = sharpen(result, parse_sharpen(sharpen_geometry))
    result = cv2.normalize(result, None, 0, 255, cv2.NORM_MINMAX)
    logger.debug(
        "Enhanced page render (stretch=%s, sharpen=%s)", contrast, sharpen_geometry
    )
    return result
