# header.py
"""
画素バッファを静的初期化配列としてCヘッダファイルに書き出すモジュール。

出力形式:
  #ifndef logo_H
  #define logo_H

  #include <stdint.h>
  #define WIDTH 2
  #define HEIGHT 1
  #define CHANNELS 1
  #define SIZE 2
  // size of data: 2
  const uint8_t data[SIZE] = {
  5,
  130,
  };
  #endif // logo_H

各要素の後ろには ", " が付きます。
配列本体は width(外側) → height → channel(内側) の順に走査し、
data[(i*height + j)*channels + k] を出力します。改行は height 1行ごと。
バッファの並びがこの順でない場合、出力は転置されたものになります。
"""
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from functools import partial

import numpy as np


class ShapeMismatchError(ValueError):
    """バッファ長が width*height*channels と一致しない"""


class InvalidNameError(ValueError):
    """出力パスから変数名を決められない"""


# --- 要素型 ---
class ElementType(Enum):
    INT8 = ('int8', 8, True)
    UINT8 = ('uint8', 8, False)
    INT16 = ('int16', 16, True)
    UINT16 = ('uint16', 16, False)
    INT32 = ('int32', 32, True)
    UINT32 = ('uint32', 32, False)
    INT64 = ('int64', 64, True)
    UINT64 = ('uint64', 64, False)

    def __init__(self, dtype_name, bits, signed):
        self.dtype_name = dtype_name
        self.bits = bits
        self.signed = signed

    @property
    def c_type(self):
        return f"{'' if self.signed else 'u'}int{self.bits}_t"

    @property
    def mask(self):
        return (1 << self.bits) - 1

    @classmethod
    def from_dtype(cls, dtype):
        dtype = np.dtype(dtype)
        for member in cls:
            if member.dtype_name == dtype.name:
                return member
        raise TypeError(f'Unsupported sample type: {dtype}')


# 16進出力の桁数（それ以外の幅はゼロ埋めなし）
HEX_DIGITS = {8: 2, 16: 4, 32: 8}


def format_hex(value, element_type):
    value = int(value) & element_type.mask
    digits = HEX_DIGITS.get(element_type.bits)
    if digits is None:
        return f'0x{value:x}'
    return f'0x{value:0{digits}x}'


def format_dec(value):
    # 符号付きの値そのもので比較するので負数は詰められない
    value = int(value)
    if value < 10:
        return f'{value:1d}'
    elif value < 100:
        return f'{value:2d}'
    return f'{value:3d}'


def resolve_name(name, output_path):
    """変数名が空なら出力ファイル名（拡張子なし）を使う。大文字化や置換はしない。"""
    if name:
        return name
    stem = os.path.splitext(os.path.basename(os.fspath(output_path)))[0]
    if not stem or stem.startswith('.'):
        raise InvalidNameError(f'Cannot derive a variable name from output path {output_path!r}')
    return stem


def check_data_type(data_type, element_type):
    """data_type が <stdint.h> の型名で、サンプルの型と合わないときに警告文を返す"""
    known = {member.c_type for member in ElementType}
    if data_type in known and data_type != element_type.c_type:
        return (f'data type {data_type} does not match {element_type.bits}-bit '
                f"{'signed' if element_type.signed else 'unsigned'} samples")
    return None


@dataclass(frozen=True)
class HeaderSpec:
    output_path: str = 'output.h'
    name: str = ''
    data_type: str = 'uint8_t'
    width: int = 0
    height: int = 0
    channels: int = 1
    static_attr: bool = False
    const_attr: bool = False
    write_hex: bool = False
    link_section: str = ''
    element_type: ElementType = ElementType.UINT8

    def __post_init__(self):
        object.__setattr__(self, 'name', resolve_name(self.name, self.output_path))
        object.__setattr__(self, 'link_section', self.link_section or '')

    @property
    def size(self):
        return self.width * self.height * self.channels


@dataclass(frozen=True)
class HeaderDocument:
    name: str
    text: str

    def lines(self):
        return self.text.splitlines()

    def __str__(self):
        return self.text


# --- ヘッダの各ブロック ---
def _front_guard(spec):
    return f'#ifndef {spec.name}_H\n#define {spec.name}_H\n\n'


def _back_guard(spec):
    return f'#endif // {spec.name}_H\n'


def _defines(spec):
    return (
        '#include <stdint.h>\n'
        f'#define WIDTH {spec.width}\n'
        f'#define HEIGHT {spec.height}\n'
        f'#define CHANNELS {spec.channels}\n'
        f'#define SIZE {spec.size}\n'
    )


def _data(spec, values):
    out = [f'// size of data: {spec.size}\n']
    if spec.link_section:
        out.append(f'__attribute__((section("{spec.link_section}")))\n')
    if spec.static_attr:
        out.append('static ')
    if spec.const_attr:
        out.append('const ')
    out.append(f'{spec.data_type} data[SIZE] = {{\n')
    if spec.write_hex:
        fmt = partial(format_hex, element_type=spec.element_type)
    else:
        fmt = format_dec
    for i in range(spec.width):
        for j in range(spec.height):
            base = (i * spec.height + j) * spec.channels
            for k in range(spec.channels):
                out.append(fmt(values[base + k]))
                out.append(', ')
            out.append('\n')
    out.append('};\n')
    return ''.join(out)


def _as_samples(buffer, element_type):
    # 空でない ndarray は型が一致していること。リスト等は要素型に変換する
    dtype = np.dtype(element_type.dtype_name)
    if isinstance(buffer, np.ndarray) and buffer.size and buffer.dtype != dtype:
        raise TypeError(f'Buffer type {buffer.dtype} does not match element type {element_type.name}')
    return np.asarray(buffer, dtype=dtype)


def render(spec, buffer):
    """HeaderSpec と画素バッファから HeaderDocument を生成する"""
    data = np.asarray(buffer)
    if data.ndim != 1:
        raise ShapeMismatchError(f'Buffer must be flat, got shape {data.shape}')
    if data.size != spec.size:
        raise ShapeMismatchError(
            f'Buffer size mismatch: {data.size} != '
            f'{spec.width}x{spec.height}x{spec.channels}')
    values = _as_samples(buffer, spec.element_type).tolist()
    text = (_front_guard(spec)
            + _defines(spec)
            + _data(spec, values)
            + _back_guard(spec))
    return HeaderDocument(spec.name, text)


def write(document, path):
    """
    同じディレクトリの一時ファイルに書いてから置き換える。
    失敗したときは一時ファイルを消し、既存のファイルには触らない。
    親ディレクトリは作らない。OSError はそのまま呼び出し元へ
    """
    path = os.fspath(path)
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix='.img2header-', suffix='.tmp', dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(document.text.encode('utf-8'))
        # mkstemp は 0600 で作るので通常の作成と同じ権限に戻す
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


def write_header(spec, buffer):
    document = render(spec, buffer)
    write(document, spec.output_path)
    return document
