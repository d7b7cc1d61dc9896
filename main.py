"""Entry point for the PDF walkthrough server."""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="PDF walkthrough server")
    parser.add_argument(
        "--taxonomy",
        default=None,
        help="JSON taxonomy file. Overrides WALKTHROUGH_TAXONOMY_PATH env var.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        default=None,
        help="Minimum log level (default: DEBUG). Overrides LOG_LEVEL env var.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    args = parser.parse_args()

    if args.taxonomy:
        os.environ["WALKTHROUGH_TAXONOMY_PATH"] = args.taxonomy

    from pdf_walkthrough.logger import logger
    from pdf_walkthrough.server import app

    if args.log_level:
        logger.set_level(args.log_level)

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
