# main.py
"""
画像ファイルをCヘッダファイル（静的初期化配列）に変換するコマンドラインツール。

使い方:
  img2header input.png
  img2header input.png -o logo.h --const-attr --static-attr --hex
  img2header input.png --width 64 --height 64 --grayscale --link-section .ext_rom

出力は {static }{const }uint8_t data[SIZE] = {...}; の形で保存されます。
変数名(-n)を省略すると出力ファイル名（拡張子なし）をインクルードガードに使います。
"""
import argparse
import sys

from .header import ElementType, HeaderSpec, check_data_type, resolve_name, write_header
from .image_converter import image_to_pixels, open_image, transform_image


def _dimension(value):
    value = int(value)
    if value < 0:
        raise argparse.ArgumentTypeError(f'must be 0 or positive: {value}')
    return value


def build_parser():
    parser = argparse.ArgumentParser(description='Convert an image into a C header with a static array')
    parser.add_argument('file', help='Path to file to convert')
    parser.add_argument('-d', '--data-type', default='uint8_t', help='Output type of data')
    parser.add_argument('--static-attr', action='store_true', help='Whether to make the data static')
    parser.add_argument('--const-attr', action='store_true', help='Whether to make the data const')
    parser.add_argument('--width', type=_dimension, default=0, help='Desired output width (0 = source width)')
    parser.add_argument('--height', type=_dimension, default=0, help='Desired output height (0 = source height)')
    parser.add_argument('--grayscale', action='store_true', help='Output as grayscale')
    parser.add_argument('-o', '--output', default='output.h', help='Path for output')
    parser.add_argument('-n', '--name', default='', help='Name of the output variable')
    parser.add_argument('--hex', action='store_true', help='Write output data in hexadecimal format')
    parser.add_argument('--link-section', default='', help='Linker section to place the data in')
    parser.add_argument('--column-major', action='store_true',
                        help='Flatten pixels column by column so the array walks the image x first')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    return parser


def run(args):
    # 画像を開く前に変数名を決める
    name = resolve_name(args.name, args.output)

    if args.verbose:
        print(f'Opening image {args.file}')
    img = open_image(args.file)

    if args.verbose:
        print(f'Image: {img.width}x{img.height}x{len(img.getbands())}')
        print('Transforming image...')
    img = transform_image(img, args.width, args.height, args.grayscale)
    pixels = image_to_pixels(img, grayscale=args.grayscale, column_major=args.column_major)

    if args.verbose:
        print(f'Image: {pixels.width}x{pixels.height}x{pixels.channels}')
        print('Creating header file...')

    spec = HeaderSpec(
        output_path=args.output,
        name=name,
        data_type=args.data_type,
        width=pixels.width,
        height=pixels.height,
        channels=pixels.channels,
        static_attr=args.static_attr,
        const_attr=args.const_attr,
        write_hex=args.hex,
        link_section=args.link_section,
        element_type=ElementType.from_dtype(pixels.data.dtype),
    )
    print(f'Var name: {spec.name}')

    warning = check_data_type(spec.data_type, spec.element_type)
    if warning:
        print(f'Warning: {warning}', file=sys.stderr)

    write_header(spec, pixels.data)
    if args.verbose:
        print(f'Header file written to {args.output}')
    print('Done!')


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except (ValueError, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
