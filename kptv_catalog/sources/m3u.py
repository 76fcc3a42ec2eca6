#!/usr/bin/env python3
"""
M3U playlist parser

Parses M3U/M3U8 playlist text into a categorized, bounded catalog. The text is
scanned line by line without splitting it into a full line list, so very large
playlists do not multiply their memory footprint.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
# setup the imports
import re, time, logging
from typing import Dict, Iterator, List, Optional
from kptv_catalog.models import CatalogConfig, CatalogEntry, EntryKind, ParsedCatalog

# setup the logger
logger = logging.getLogger(__name__)

# metadata line marker
EXTINF_MARKER = "#EXTINF:"

# category used when a metadata line has no group-title
DEFAULT_CATEGORY = "Uncategorized"

"""
Iterate over the lines of a text without materializing a line list

@param content: str Raw text
@return Iterator: Lines without their trailing newline
"""
def iter_lines(content: str) -> Iterator[str]:

    # hold the scan position
    start = 0
    length = len(content)

    # walk newline to newline
    while start < length:
        end = content.find("\n", start)
        if end == -1:
            end = length
        yield content[start:end]
        start = end + 1

"""
Decide which collection a category belongs to

@param category: str Category name from the playlist
@return EntryKind: movie for movie/vod categories, series for series, else live
"""
def classify_category(category: str) -> EntryKind:

    # case-insensitive substring heuristic
    lowered = category.lower()
    if "movie" in lowered or "vod" in lowered:
        return EntryKind.MOVIE
    if "series" in lowered:
        return EntryKind.SERIES
    return EntryKind.LIVE

class M3UParser:

    # pre-compiled regex patterns for the whitelisted EXTINF attributes
    _GROUP_PATTERN = re.compile(r'group-title="([^"]*)"', re.IGNORECASE)
    _LOGO_PATTERN = re.compile(r'tvg-logo="([^"]*)"', re.IGNORECASE)
    _TVG_ID_PATTERN = re.compile(r'tvg-id="([^"]*)"', re.IGNORECASE)

    """
    Initialize the M3UParser
    Sets the per-kind entry ceilings.

    @param max_live: int Maximum number of live entries kept
    @param max_movie: int Maximum number of movie entries kept
    @param max_series: int Maximum number of series entries kept
    """
    def __init__(self, max_live: int = 5000, max_movie: int = 2000, max_series: int = 1000):

        # setup the internals
        self.max_live = max_live
        self.max_movie = max_movie
        self.max_series = max_series

    """
    Build a parser from the catalog configuration

    @param config: CatalogConfig Catalog tunables
    @return M3UParser: Parser using the configured ceilings
    """
    @classmethod
    def from_config(cls, config: CatalogConfig) -> "M3UParser":
        return cls(config.max_live, config.max_movie, config.max_series)

    """
    Parse M3U playlist content
    Malformed or unrecognized lines are skipped. Parsing stops early once all
    three collections are full at the same time.

    @param content: str Raw M3U playlist content
    @return ParsedCatalog: Categorized entries within the configured ceilings
    """
    def parse(self, content: str) -> ParsedCatalog:

        # hold the collections and the categories, dict keeps first-seen order
        categories: Dict[str, None] = {}
        collections: Dict[EntryKind, List[CatalogEntry]] = {
            EntryKind.LIVE: [],
            EntryKind.MOVIE: [],
            EntryKind.SERIES: [],
        }
        ceilings = {
            EntryKind.LIVE: self.max_live,
            EntryKind.MOVIE: self.max_movie,
            EntryKind.SERIES: self.max_series,
        }

        # setup the running state
        pending: Optional[dict] = None
        stream_id = 1
        line_count = 0
        truncated = False
        started = time.perf_counter()

        # loop over each line
        for raw_line in iter_lines(content):

            # stop once every collection is saturated
            if all(len(collections[kind]) >= ceilings[kind] for kind in collections):
                truncated = True
                break

            line_count += 1
            line = raw_line.strip()

            # metadata line, replaces any entry still waiting for its url
            if line.startswith(EXTINF_MARKER):
                pending = self._parse_metadata(line, stream_id)
                stream_id += 1

            # the url line completing the pending entry
            elif line and not line.startswith("#") and pending is not None:

                # record the category and pick the destination
                category = pending["category"]
                categories.setdefault(category, None)
                kind = classify_category(category)
                target = collections[kind]

                # keep it only while the collection has room
                if len(target) < ceilings[kind]:
                    target.append(CatalogEntry(
                        num=pending["stream_id"],
                        name=pending["name"],
                        kind=kind,
                        stream_id=pending["stream_id"],
                        category_id=category,
                        direct_source=line,
                        stream_icon=pending["logo"],
                        epg_channel_id=pending["tvg_id"] if kind == EntryKind.LIVE else "",
                    ))

                # clear the pending entry for the next stream
                pending = None

        # build the immutable result
        catalog = ParsedCatalog(
            categories=tuple(categories),
            live=tuple(collections[EntryKind.LIVE]),
            movie=tuple(collections[EntryKind.MOVIE]),
            series=tuple(collections[EntryKind.SERIES]),
        )

        # log the summary
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Parsed {line_count} lines in {elapsed_ms:.0f}ms: {len(catalog.categories)} categories, "
            f"{len(catalog.live)} live, {len(catalog.movie)} movies, {len(catalog.series)} series"
            f"{' (limits reached, stopped early)' if truncated else ''}"
        )
        return catalog

    """
    Parse an EXTINF metadata line
    Extracts the display name and the whitelisted attributes, applying defaults.

    @param line: str Stripped metadata line
    @param stream_id: int Identifier assigned to this entry
    @return dict: Pending entry data
    """
    def _parse_metadata(self, line: str, stream_id: int) -> dict:

        # the display name is whatever follows the last comma
        name = ""
        parts = line.rsplit(",", 1)
        if len(parts) == 2:
            name = parts[1].strip()

        # setup the attributes using pre-compiled patterns
        match = self._GROUP_PATTERN.search(line)
        category = match.group(1) if match and match.group(1) else DEFAULT_CATEGORY

        match = self._LOGO_PATTERN.search(line)
        logo = match.group(1) if match else ""

        match = self._TVG_ID_PATTERN.search(line)
        tvg_id = match.group(1) if match else ""

        # return the pending entry
        return {
            "stream_id": stream_id,
            "name": name or f"Channel {stream_id}",
            "category": category,
            "logo": logo,
            "tvg_id": tvg_id,
        }
