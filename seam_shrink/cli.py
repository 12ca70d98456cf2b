import argparse
import logging
import time
from typing import List, Optional

from seam_shrink import carve
from seam_shrink.io import load_image, save_image

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='seam-shrink',
        description='Shrink an image to the given size by seam carving. '
                    'The result is always written as PNG.')
    parser.add_argument('src', type=str, help='input image')
    parser.add_argument('dst', type=str, help='output image')
    parser.add_argument('width', type=int, help='target width in pixels')
    parser.add_argument('height', type=int, help='target height in pixels')
    parser.add_argument('--order', type=str, default=carve.HEIGHT_FIRST,
                        choices=carve.VALID_ORDERS)
    parser.add_argument('--seed-first-row', action='store_true',
                        help='seed the top row of the cumulative energy map '
                             'from the energy map')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)s %(message)s')

    start = time.time()
    try:
        logger.info('Loading source image from %s', args.src)
        src = load_image(args.src)
        src_h, src_w = src.shape[:2]

        logger.info('Carving %dx%d down to %dx%d, this may take a while',
                    src_w, src_h, args.width, args.height)
        dst = carve.resize(src, (args.width, args.height), args.order,
                           args.seed_first_row)

        logger.info('Saving output image to %s', args.dst)
        save_image(dst, args.dst)
    except (ValueError, OSError) as e:
        logger.error('%s', e)
        return 1
    finally:
        logger.info('Done in %.4f second(s)', time.time() - start)

    return 0

