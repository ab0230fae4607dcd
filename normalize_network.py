#!/usr/bin/env python3
"""
Normalize a river network image and export it as a BMP texture.

Runs the global reconciliation pass over a bulk-loaded image so every
river pixel carries the role its connectivity implies.
"""

import sys

import numpy as np
import structlog

from river_editor.core import Role, reclassify_all, role_map
from river_editor.logging_config import configure_logging
from river_editor.utils.image_io import ImageLoadError, load_raster, save_bmp

logger = structlog.get_logger()


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Reclassify a river network image and save it as BMP")
    parser.add_argument("input", help="Input image (any format Pillow can read)")
    parser.add_argument("-o", "--output", help="Output BMP path (defaults to the configured export filename)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")

    args = parser.parse_args()
    configure_logging(level=args.log_level, log_format="console")

    try:
        buffer = load_raster(args.input)
    except ImageLoadError as e:
        logger.error("Could not load input", path=args.input, error=str(e))
        return 1

    reclassify_all(buffer)
    path = save_bmp(buffer, args.output)

    roles = role_map(buffer)
    logger.info(
        "Network normalized",
        output=str(path),
        sources=int(np.sum(roles == Role.SOURCE)),
        channels=int(np.sum(roles == Role.CHANNEL)),
        junctions=int(np.sum(roles == Role.JUNCTION)),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
