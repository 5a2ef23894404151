import math
from typing import NamedTuple

import cv2
import numpy as np

from lambda_image_processing.errors import InvalidInputError

TARGET_RATIO = 1.5
OUTPUT_WIDTH = 800
OUTPUT_HEIGHT = 534


class Rectangle(NamedTuple):
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y


def crop_rectangle(width, height, target_ratio=TARGET_RATIO):
    """
    Center-crop rectangle bringing a width x height image to target_ratio

    Parameters:
        width (int): source width in pixels
        height (int): source height in pixels
        target_ratio (float): width:height ratio to reach

    Returns:
        Rectangle, or None when the image already has the target ratio.
    """
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Image has degenerate size {width}x{height}")

    source_ratio = width / height
    if source_ratio < target_ratio:
        # Crop the image height wise
        target_height = math.floor(width / target_ratio)
        offset = math.floor((height - target_height) / 2)
        rect = Rectangle(0, offset, width, offset + target_height)
    elif source_ratio > target_ratio:
        # Crop the image width wise
        target_width = math.floor(target_ratio * height)
        offset = math.floor((width - target_width) / 2)
        rect = Rectangle(offset, 0, offset + target_width, height)
    else:
        return None

    if rect.width == 0 or rect.height == 0:
        raise InvalidInputError(f"Image {width}x{height} is too narrow to crop to ratio {target_ratio}")
    return rect


def has_alpha(img):
    return img.ndim == 3 and img.shape[2] == 4


def premultiply_alpha(img):
    """BGRA with the color channels scaled by alpha, so transparent pixels become black."""
    color = img[:, :, :3].astype(np.uint32)
    alpha = img[:, :, 3:4].astype(np.uint32)
    color = (color * alpha + 127) // 255
    return np.dstack([color.astype(np.uint8), img[:, :, 3]])


def unpremultiply_alpha(img):
    color = img[:, :, :3].astype(np.uint32)
    alpha = img[:, :, 3:4].astype(np.uint32)
    divisor = np.maximum(alpha, 1)
    straight = np.where(alpha > 0, np.minimum((color * 255 + divisor // 2) // divisor, 255), 0)
    return np.dstack([straight.astype(np.uint8), img[:, :, 3]])


def flatten_alpha(img):
    """Drop the alpha channel the way a JPEG encoder sees it: premultiplied over black."""
    if has_alpha(img):
        return premultiply_alpha(img)[:, :, :3].copy()
    return img


def crop(img, rect):
    return img[rect.min_y:rect.max_y, rect.min_x:rect.max_x].copy()


def transform(img):
    """
    Center-crop img to 3:2 and resize it to OUTPUT_WIDTH x OUTPUT_HEIGHT with Lanczos.
    BGRA images are resampled premultiplied so hidden colors under transparent pixels don't bleed.
    """
    if img is None:
        raise InvalidInputError("No image to transform")
    height, width = img.shape[:2]
    rect = crop_rectangle(width, height)
    if rect is not None:
        img = crop(img, rect)
    if not has_alpha(img):
        return cv2.resize(img, (OUTPUT_WIDTH, OUTPUT_HEIGHT), interpolation=cv2.INTER_LANCZOS4)

    resized = cv2.resize(premultiply_alpha(img), (OUTPUT_WIDTH, OUTPUT_HEIGHT), interpolation=cv2.INTER_LANCZOS4)
    return unpremultiply_alpha(resized)
