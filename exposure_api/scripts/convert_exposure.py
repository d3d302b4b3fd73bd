from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

from exposure_api.config import get_settings
from exposure_api.services.conversion import ExposureConverter, MissingMetadata


def _format_stops(stops: float) -> str:
	if not math.isfinite(stops):
		return str(stops)
	return f"{stops:+.2f}"


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(description="Express a target exposure relative to the exposure recorded in a photo")
	parser.add_argument("image", help="Image file whose EXIF exposure is the reference")
	parser.add_argument("--f-number", required=True, help="Target aperture, e.g. 2.8")
	parser.add_argument("--exposure-time", required=True, help="Target exposure time, e.g. 1/250 or 0.5")
	parser.add_argument("--iso", required=True, help="Target ISO")
	parser.add_argument("--json", action="store_true", help="Print metadata and result as JSON")
	args = parser.parse_args(argv)

	logging.basicConfig(level=get_settings().log_level, format="%(levelname)s %(name)s: %(message)s")

	converter = ExposureConverter()
	metadata = converter.extract_metadata(Path(args.image))
	try:
		result = converter.convert_from_metadata(args.f_number, args.exposure_time, args.iso)
	except MissingMetadata as e:
		print(f"error: {e}", file=sys.stderr)
		return 2

	if args.json:
		print(json.dumps({"metadata": metadata.to_dict(), "result": result.to_dict()}, indent=2))
	else:
		o, t = result.original, result.target
		print(f"Source: f/{o.f_number} {o.exposure_time}s ISO {o.iso}")
		print(f"Target: f/{t.f_number} {t.exposure_time}s ISO {t.iso}")
		print(f"Factor: {result.factor:.4g} ({_format_stops(result.stops)} stops)")
	return 0


if __name__ == "__main__":
	sys.exit(main())
