"""Print the preview the bot would post for the first link in a message."""
import argparse
import asyncio
import sys

from dotenv import load_dotenv
load_dotenv()

from linkpreview.config import PREVIEW_TIMEOUT  # noqa: E402
from linkpreview.errors import PreviewError  # noqa: E402
from linkpreview.link_finder import find_link  # noqa: E402
from linkpreview.logging_config import setup_logging  # noqa: E402
from linkpreview.preview import remote_preview  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("text", help="chat message containing a link")
    parser.add_argument("--timeout", type=float, default=PREVIEW_TIMEOUT,
                        help="overall deadline in seconds")
    args = parser.parse_args(argv)

    setup_logging()

    link = find_link(args.text)
    if link is None:
        return 0
    try:
        reply = asyncio.run(
            asyncio.wait_for(
                remote_preview(link.protocol, link.url, deadline=args.timeout),
                args.timeout,
            )
        )
    except (PreviewError, asyncio.TimeoutError) as e:
        print(f"error: {str(e) or 'preview timed out'}", file=sys.stderr)
        return 1
    print(reply)
    return 0


if __name__ == "__main__":
    sys.exit(main())
