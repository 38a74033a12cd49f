import sys
import argparse

import httpx

from surface_prober.config import VERSION, PLAYWRIGHT
from surface_prober.core.bridge import BROWSERS, BridgeError, PlaywrightBridge
from surface_prober.core.colors import Colors as C
from surface_prober.core.compiler import InvalidIdentifierError
from surface_prober.core.outcomes import DatasetInconsistencyError
from surface_prober.engine import classify_catalogue, load_catalogue


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browser API surface prober")
    parser.add_argument("dataset", help="browser-compat-data JSON, namespace YAML/JSON file, or URL")
    parser.add_argument("-o", "--output", default="meta.json", help="Where to write the finalized records")
    parser.add_argument("-s", "--sessions", type=int, default=PLAYWRIGHT["sessions"], help="Parallel browser sessions")
    parser.add_argument("-b", "--browser", choices=BROWSERS, default=PLAYWRIGHT["browser"], help="Browser engine")
    parser.add_argument("--url", default=PLAYWRIGHT["start_url"], help="Page the probes run on")
    parser.add_argument("--headed", action="store_true", help="Show the browser windows")
    parser.add_argument("--css-surface", help="Also enumerate supported CSS keys into this JSON file")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    if verbose:
        print(f"{C.BLUE}{C.BOLD}Surface Prober v{VERSION}{C.RESET}")

    try:
        records = load_catalogue(args.dataset)
    except (FileNotFoundError, ValueError, httpx.HTTPError) as e:
        print(f"{C.RED}[!] Could not load dataset: {e}{C.RESET}")
        return 1

    if verbose:
        print(f"[+] Catalogue: {len(records)} records from {args.dataset}")

    bridge = PlaywrightBridge(
        sessions=args.sessions,
        browser=args.browser,
        start_url=args.url,
        headless=not args.headed,
        progress=verbose,
    )

    try:
        classify_catalogue(
            records,
            bridge=bridge,
            output=args.output,
            css_surface=args.css_surface,
            verbose=verbose,
        )
    except DatasetInconsistencyError as e:
        print(f"{C.RED}[!] Dataset inconsistency:{C.RESET}")
        for message in e.messages:
            print(f"    - {message}")
        return 1
    except InvalidIdentifierError as e:
        print(f"{C.RED}[!] {e}{C.RESET}")
        return 1
    except BridgeError as e:
        print(f"{C.RED}[!] Browser run failed: {e}{C.RESET}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
