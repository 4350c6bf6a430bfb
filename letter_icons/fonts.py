"""Font URL resolution and cached downloads."""

import gzip
import hashlib
import logging
import os
import tempfile
import urllib.request
from concurrent.futures import ThreadPoolExecutor, as_completed

BUILTIN_FONTS = ("open-sans", "inter")
GOOGLE_FONT_SUBSETS = ("latin", "latin-ext", "symbols", "all")

HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:147.0) Gecko/20100101 Firefox/147.0",
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip",
}


def get_font_url(key, bold=False, italic=False):
    """CDN URL of a built-in font variant, or None when it doesn't exist."""
    weight = "Bold" if bold else "SemiBold"
    if key == "open-sans":
        style = "Italic" if italic else ""
        return (
            "https://cdn.jsdelivr.net/gh/googlefonts/opensans@main/fonts/ttf/"
            f"OpenSans-{weight}{style}.ttf"
        )
    if key == "inter":
        if italic:
            return None
        return f"https://cdn.jsdelivr.net/gh/rsms/inter@v3.19/docs/font-files/Inter-{weight}.otf"
    return None


def fontsource_slug(name):
    return "-".join(name.strip().lower().split())


def google_font_urls(name, weight="600", bold=False, italic=False, subset=None):
    """Candidate fontsource URLs for a Google font, most specific subset first."""
    slug = fontsource_slug(name)
    effective_weight = "700" if bold else str(weight)
    style = "italic" if italic else "normal"
    subsets = [subset] if subset else GOOGLE_FONT_SUBSETS
    return [
        f"https://cdn.jsdelivr.net/fontsource/fonts/{slug}@latest/{s}-{effective_weight}-{style}.woff"
        for s in subsets
    ]


def cache_path_for(url, cache_dir=None):
    if cache_dir is None:
        cache_dir = tempfile.gettempdir()
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    name = url.rsplit("/", 1)[-1] or "font"
    return os.path.join(cache_dir, f"{digest}_{name}")


def download_font(url, cache_dir=None, timeout=30):
    """Download url into the cache directory and return the local path."""
    cache_path = cache_path_for(url, cache_dir)

    if os.path.exists(cache_path):
        logging.debug("Using cached font: %s", cache_path)
        return cache_path

    logging.info("Downloading font %s", url.rsplit("/", 1)[-1])
    logging.debug("URL: %s", url)

    try:
        req = urllib.request.Request(url, headers=HEADERS)
        with urllib.request.urlopen(req, timeout=timeout) as response:
            if response.status != 200:
                raise ValueError(f"HTTP {response.status}")

            data = response.read()

            # Decompress if gzip compressed
            if data[:2] == b"\x1f\x8b":
                data = gzip.decompress(data)

            os.makedirs(os.path.dirname(cache_path), exist_ok=True)
            with open(cache_path, "wb") as f:
                f.write(data)

            return cache_path
    except Exception as exc:
        raise ValueError(f"Failed to download font from {url}: {exc}") from exc


def download_first(urls, cache_dir=None):
    """Return the path of the first URL that downloads, trying them in order."""
    errors = []
    for url in urls:
        try:
            return download_font(url, cache_dir)
        except ValueError as exc:
            logging.debug("%s", exc)
            errors.append(str(exc))
    raise ValueError("; ".join(errors) or "no font URLs to try")


def resolve_font(
    font="open-sans",
    font_file=None,
    google_font=None,
    weight="600",
    bold=False,
    italic=False,
    cache_dir=None,
):
    """Local path of the font selected by the command-line options."""
    if font_file:
        if not os.path.isfile(font_file):
            raise ValueError(f"File not found: {font_file}")
        return font_file

    if google_font:
        try:
            return download_first(google_font_urls(google_font, weight, bold, italic), cache_dir)
        except ValueError as exc:
            raise ValueError(
                f'Could not load Google Font "{google_font}". Check spelling. ({exc})'
            ) from exc

    if font not in BUILTIN_FONTS:
        raise ValueError(f'Unknown font "{font}". Valid fonts: {", ".join(BUILTIN_FONTS)}')
    url = get_font_url(font, bold, italic)
    if url is None:
        raise ValueError(
            f'Font "{font}" does not have the requested variant (bold={bold}, italic={italic}).'
        )
    return download_font(url, cache_dir)


def prefetch_fonts(variants, cache_dir=None, jobs=4):
    """Download several (key, bold, italic) built-in variants in parallel.

    Returns {variant: path or None}.
    """
    results = {}
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = {}
        for variant in variants:
            url = get_font_url(*variant)
            if url is None:
                results[variant] = None
                continue
            futures[executor.submit(download_font, url, cache_dir)] = variant

        for future in as_completed(futures):
            variant = futures[future]
            try:
                results[variant] = future.result()
            except ValueError as exc:
                logging.error("%s", exc)
                results[variant] = None
    return results
