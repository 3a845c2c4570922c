"""
Search GitHub for Java 8 Maven repositories with JUnit 5 tests, clone them and
keep only those that compile and pass their own test suite.

Usage:
    export GITHUB_TOKEN="ghp_xxx"     # or put it in .env
    repo-harvest -d cloned_repos -m 20 -p 5
"""

import argparse
import atexit
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from harvester.config import HarvestConfig
from harvester.errors import PrerequisiteMissing, SearchError
from harvester.ingestion.github_search import GitHubSearchClient
from harvester.ingestion.repo_lists import PendingList
from harvester.utils.logging_utils import setup_logging
from harvester.utils.prerequisites import check_prerequisites
from harvester.workflows.pipeline_graph import PipelineCoordinator

logger = logging.getLogger("harvester.workflows.main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find, clone and validate Java 8 Maven repositories with JUnit 5 tests.",
        epilog="Environment variables:\n  GITHUB_TOKEN        GitHub API token for authenticated requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-t", "--token", default=None, help="GitHub API token (default: $GITHUB_TOKEN).")
    parser.add_argument("-d", "--dir", dest="clone_dir", type=Path, default=None, help="Clone directory (default: ./cloned_repos).")
    parser.add_argument("-m", "--max", dest="max_repos", type=int, default=None, help="Maximum repositories to process (default: 500).")
    parser.add_argument("-p", "--pages", dest="max_pages", type=int, default=None, help="Number of pages to fetch from GitHub (default: 50).")
    parser.add_argument("--test-timeout", type=float, default=None, help="Seconds allowed for each test suite (default: 300).")
    parser.add_argument("--java-version", default=None, help="Target Java version (default: 1.8).")
    parser.add_argument("--log-file", type=Path, default=None, help="Log file (default: ./repo_validation.log).")
    parser.add_argument("--validated-list", type=Path, default=None, help="List of kept repositories (default: ./validated_repos.txt).")
    parser.add_argument("--search-only", action="store_true", help="Print the candidates a run would process, then stop.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> HarvestConfig:
    return HarvestConfig.from_env(
        token=args.token,
        clone_dir=args.clone_dir,
        max_repos=args.max_repos,
        max_pages=args.max_pages,
        test_timeout=args.test_timeout,
        java_version=args.java_version,
        log_file=args.log_file,
        validated_list=args.validated_list,
    )


def install_cleanup(pending: PendingList) -> None:
    """Remove the pending list when the process exits, including on SIGTERM."""
    def cleanup():
        pending.discard()
        logger.info("Cleanup completed")

    def terminate(signum, frame):
        sys.exit(128 + signum)

    atexit.register(cleanup)
    signal.signal(signal.SIGTERM, terminate)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = build_config(args)
    setup_logging(config.log_file)

    logger.info("Starting Java repository clone and validation")

    try:
        if args.search_only:
            candidates = GitHubSearchClient(config).search()
            for c in candidates:
                print(f"{c.name} | {c.clone_location}")
            return 0

        install_cleanup(PendingList(config.pending_list))
        check_prerequisites(config.required_tools, config.clone_dir)
        candidates = GitHubSearchClient(config).search()
        if not candidates:
            logger.warning("No repositories found matching criteria")
            return 0

        report = PipelineCoordinator(config).run(candidates)

    except PrerequisiteMissing:
        return 1
    except SearchError as e:
        logger.error(f"Search failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    print(report.render(str(config.clone_dir), str(config.log_file)))
    logger.info("Script execution completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
