import argparse
import logging
import os
import platform
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import Config
from .errors import ScraperError, ValidationError
from .fetcher import HttpFetcher, iter_gateways
from .models import MetadataOverride
from .progress import ProgressTracker
from .session import ConversionSession

if platform.system() == 'Windows':
    os.system('color')


class ConsoleColors:
    """ANSI color codes for console output."""
    RED: str = '\033[91m'
    GREEN: str = '\033[92m'
    YELLOW: str = '\033[93m'
    RESET: str = '\033[0m'


def initialize_logging(debug_mode: bool, log_file: str = 'webtoepub.log') -> None:
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler() if debug_mode else logging.NullHandler()
        ]
    )


def parse_range(value: str) -> Tuple[int, int]:
    match = re.fullmatch(r'\s*(\d+)\s*-\s*(\d+)\s*', value or '')
    if not match:
        raise argparse.ArgumentTypeError("Range must look like START-END, e.g. 1-50")
    first, last = int(match.group(1)), int(match.group(2))
    if first < 1 or first > last:
        raise argparse.ArgumentTypeError("Start chapter cannot be greater than end chapter")
    return first, last


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Convert a web novel into an EPUB file')

    parser.add_argument('--url', type=str, required=True, help='Start page listing the chapters')

    metadata = parser.add_argument_group('metadata overrides')
    metadata.add_argument('--title', type=str, default='', help='Novel title')
    metadata.add_argument('--author', type=str, default='', help='Author name')
    metadata.add_argument('--language', type=str, default='', help='Language code')
    metadata.add_argument('--filename', type=str, default='', help='Output file name')
    metadata.add_argument('--subject', type=str, default='', help='Subject')
    metadata.add_argument('--description', type=str, default='', help='Description')
    metadata.add_argument('--cover-url', type=str, default='', help='Cover image URL')

    parser.add_argument('--output-dir', type=str, default='.', help='Directory for the EPUB file')
    parser.add_argument('--range', type=parse_range, help='Only include chapters START-END (1-based)')
    parser.add_argument('--gateway', action='append', default=[],
                        help='Proxy URL template containing {url}; may be repeated')
    parser.add_argument('--min-length', type=int, help='Minimum chapter text length')
    parser.add_argument('--density', type=float, help='Text density threshold for content detection')
    parser.add_argument('--delay', type=float, help='Seconds to wait between chapters')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    config = Config(gateways=iter_gateways(args.gateway))
    if args.min_length is not None:
        config.min_content_length = args.min_length
    if args.density is not None:
        config.density_threshold = args.density
    if args.delay is not None:
        config.chapter_delay = args.delay
    config.validate()
    return config


def build_override(args: argparse.Namespace) -> MetadataOverride:
    return MetadataOverride(
        title=args.title,
        author=args.author,
        language=args.language,
        filename=args.filename,
        subject=args.subject,
        description=args.description,
        cover_url=args.cover_url,
    )


def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    session = ConversionSession(HttpFetcher(config), progress=ProgressTracker(), config=config)

    chapters = session.analyse(args.url)
    print(f"\nTitle: {session.metadata.title}")
    if session.metadata.author:
        print(f"Author: {session.metadata.author}")
    print(f"Chapters found: {len(chapters)}")

    if args.range:
        session.select_range(*args.range)

    failures = session.fetch_chapters()
    if failures:
        print(f"\n{ConsoleColors.YELLOW}Warning: {failures} chapters failed{ConsoleColors.RESET}")
        for chapter in chapters:
            if chapter.selected and chapter.error:
                print(f"  {chapter.title}: {chapter.error}")

    result = session.package(build_override(args))
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / result.filename
    output_path.write_bytes(result.epub)

    print(f"\n{ConsoleColors.GREEN}Successfully created: {output_path}{ConsoleColors.RESET}")
    print(f"Total chapters: {result.packaged + result.failures}")
    print(f"Successful: {result.packaged}")
    print(f"Failed: {result.failures}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    initialize_logging(args.debug)
    logger = logging.getLogger(__name__)
    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except ValidationError as e:
        print(f"\n{ConsoleColors.RED}Invalid input: {str(e)}{ConsoleColors.RESET}")
        return 2
    except ScraperError as e:
        logger.error(f"Conversion failed: {str(e)}")
        print(f"\n{ConsoleColors.RED}Error: {str(e)}{ConsoleColors.RESET}")
        if args.debug:
            import traceback
            print("\nFull error trace:")
            print(traceback.format_exc())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
