# image_converter.py
"""
画像ファイル（PNG/JPG/BMP等）を読み込み、ヘッダ生成用の画素バッファに変換するモジュール。

- 幅・高さに 0 を指定すると元画像のサイズを使う（リサイズなし）
- リサイズは最近傍法。縦横比を保ったまま指定サイズに収まる最大サイズにする
- grayscale=True なら1チャンネル(L)、それ以外は3チャンネル(RGB)
"""
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    width: int
    height: int
    channels: int
    data: np.ndarray

    @property
    def size(self):
        return self.width * self.height * self.channels


def open_image(image_path):
    return Image.open(image_path)


# --- リサイズ後のサイズを求める ---
def fit_dimensions(src_w, src_h, width=0, height=0):
    target_w = width or src_w
    target_h = height or src_h
    ratio = min(target_w / src_w, target_h / src_h)
    # 四捨五入（0.5は切り上げ）、最低1ピクセル
    new_w = max(int(math.floor(src_w * ratio + 0.5)), 1)
    new_h = max(int(math.floor(src_h * ratio + 0.5)), 1)
    return new_w, new_h


def transform_image(img, width=0, height=0, grayscale=False):
    size = fit_dimensions(img.width, img.height, width, height)
    if size != img.size:
        img = img.resize(size, Image.Resampling.NEAREST)
    if grayscale:
        img = img.convert('L')
    return img


def image_to_pixels(img, grayscale=False, column_major=False):
    """
    画像を PixelBuffer に変換する。

    通常は画像の行順（y外側、x内側）で平坦化する。
    column_major=True のときは x外側、y内側に並べ替えてから平坦化するので、
    ヘッダの width(外側) → height の走査と画像の向きが一致する。
    """
    if grayscale:
        arr = np.asarray(img.convert('L'), dtype=np.uint8)[:, :, np.newaxis]
    else:
        arr = np.asarray(img.convert('RGB'), dtype=np.uint8)
    height, width, channels = arr.shape
    if column_major:
        arr = arr.transpose(1, 0, 2)
    return PixelBuffer(width, height, channels, arr.flatten())


def load_pixels(image_path, width=0, height=0, grayscale=False, column_major=False):
    img = transform_image(open_image(image_path), width, height, grayscale)
    return image_to_pixels(img, grayscale=grayscale, column_major=column_major)
