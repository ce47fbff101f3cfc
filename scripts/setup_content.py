"""Create the content folder layout with a sample story."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from max_chronicles.scanner import ARTWORK_CATEGORIES, ContentLayout

SAMPLE_STORY_NAME = "the-great-fire-of-london.txt"
SAMPLE_STORY = """Chronicles of Max
A Short Story
Author: Max the Demon Cat
https://example.invalid/the-great-fire-of-london
The Great Fire of London
For most, the Great Fire of London was a tragedy. For me, it was Tuesday.

I had been living in the city for about 600 years by then, and honestly, the place was getting a bit stale.

So when that baker on Pudding Lane left his oven on overnight, I may have... encouraged the flames a bit.

Of course, I didn't start the fire. That would be irresponsible. I just... made it more interesting.

- Max, Demon Cat and Unofficial Fire Safety Inspector
"""


def content_directories(root: Path, layout: ContentLayout | None = None) -> List[Path]:
    layout = layout or ContentLayout()
    directories = [root / layout.comics / f"Series {number}" for number in (1, 2, 3)]
    directories.append(root / layout.stories)
    directories.extend(root / layout.artwork / category for category in ARTWORK_CATEGORIES)
    directories.append(root / layout.thumbnails)
    return directories


def setup_content(root: Path) -> List[Path]:
    """Create missing content folders and the sample story below *root*.

    Existing folders and files are left untouched.

    Returns
    -------
    list[Path]
        Paths that were created by this call.
    """
    created: List[Path] = []
    for directory in content_directories(root):
        if not directory.exists():
            directory.mkdir(parents=True)
            created.append(directory)

    story = root / ContentLayout().stories / SAMPLE_STORY_NAME
    if not story.exists():
        story.write_text(SAMPLE_STORY, encoding="utf-8")
        created.append(story)
    return created


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prepare a content root for The Chronicles of Max.")
    parser.add_argument("content_root", nargs="?", default=".", help="Directory to prepare. Defaults to %(default)s.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    root = Path(args.content_root).expanduser()
    try:
        created = setup_content(root)
    except OSError as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return 1

    for path in created:
        print(f"Created {path}")
    print("Setup complete.")
    print('Name comic pages "01 - Comic Title.ext" and artwork "Title - Author.ext".')
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
