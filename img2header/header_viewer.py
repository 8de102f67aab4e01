# header_viewer.py
"""
img2header で生成したCヘッダファイルを読み込み、画像として表示・保存するツール。

使い方:
  img2header-view logo.h
または
  img2header-view logo.h --save logo.png

- WIDTH/HEIGHT/CHANNELS/SIZE の #define と data[SIZE] の配列を読む
- 16進(0x..)・10進どちらの出力にも対応
- 表示にはmatplotlib、保存にはPillowを利用します。
"""
import argparse
import re
import sys

import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

DEFINE_PATTERN = re.compile(r'#define\s+(WIDTH|HEIGHT|CHANNELS|SIZE)\s+(\d+)')
ARRAY_PATTERN = re.compile(r'data\[SIZE\]\s*=\s*\{([^}]*)\}', re.DOTALL)
VALUE_PATTERN = re.compile(r'-?0x[0-9A-Fa-f]+|-?\d+')

IMAGE_MODES = {1: 'L', 3: 'RGB', 4: 'RGBA'}


# --- ヘッダファイルの読み込み ---
def parse_header(text):
    defines = {key: int(value) for key, value in DEFINE_PATTERN.findall(text)}
    missing = [key for key in ('WIDTH', 'HEIGHT', 'CHANNELS', 'SIZE') if key not in defines]
    if missing:
        raise ValueError(f'Missing defines in header file: {", ".join(missing)}')
    arr = ARRAY_PATTERN.search(text)
    if not arr:
        raise ValueError('No array found in header file')
    # 配列内のコメントは除く
    body = re.sub(r'//.*?$', '', arr.group(1), flags=re.MULTILINE)
    nums = [int(tok, 16) if 'x' in tok else int(tok) for tok in VALUE_PATTERN.findall(body)]
    if len(nums) != defines['SIZE']:
        raise ValueError(f'Array size mismatch: {len(nums)} != {defines["SIZE"]}')
    return defines, np.array(nums, dtype=np.int64)


def load_c_array_header(header_path):
    with open(header_path, 'r', encoding='utf-8') as f:
        return parse_header(f.read())


def header_to_image_array(defines, values, column_major=False):
    """配列を (高さ, 幅, チャンネル) の画像配列に戻す"""
    w, h, c = defines['WIDTH'], defines['HEIGHT'], defines['CHANNELS']
    if column_major:
        # x外側で並べたバッファ
        return values.reshape((w, h, c)).transpose(1, 0, 2)
    return values.reshape((h, w, c))


def save_image(img, output_path):
    mode = IMAGE_MODES.get(img.shape[2])
    if mode is None:
        raise ValueError(f'Cannot save image with {img.shape[2]} channels')
    arr = np.clip(img, 0, 255).astype(np.uint8)
    if mode == 'L':
        arr = arr[:, :, 0]
    Image.fromarray(arr).save(output_path)


def show_image(img, title=''):
    arr = np.clip(img, 0, 255).astype(np.uint8)
    fig, ax = plt.subplots()
    if arr.shape[2] == 1:
        ax.imshow(arr[:, :, 0], cmap='gray', vmin=0, vmax=255)
    else:
        ax.imshow(arr)
    ax.set_title(title)
    ax.set_axis_off()
    plt.tight_layout()
    plt.show()


def main(argv=None):
    parser = argparse.ArgumentParser(description='Show or save the image stored in a generated C header')
    parser.add_argument('headerfile')
    parser.add_argument('--save', metavar='IMAGE', help='画像ファイルとして保存（表示はしない）')
    parser.add_argument('--column-major', action='store_true', help='x外側で並べたバッファとして読む')
    args = parser.parse_args(argv)
    try:
        defines, values = load_c_array_header(args.headerfile)
        img = header_to_image_array(defines, values, column_major=args.column_major)
        if args.save:
            save_image(img, args.save)
            print(f'Image written to {args.save}')
        else:
            show_image(img, title=args.headerfile)
    except (ValueError, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
