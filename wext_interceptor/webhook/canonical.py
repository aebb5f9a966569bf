"""Repository URL canonicalization."""


def _strip_affixes(url: str) -> str:
    canonical = url.lower()
    canonical = canonical.removesuffix(".git")
    canonical = canonical.removeprefix("https://")
    canonical = canonical.removeprefix("http://")
    return canonical


def canonicalize_repository_url(url: str) -> str:
    """
    Normalize a clone URL so two spellings of one repository compare equal.

    Lower-cases the string, then strips a trailing ``.git``, a leading
    ``https://`` and a leading ``http://``, in that order. The steps are
    repeated until nothing changes, so canonical URLs are fixed points.

    >>> canonicalize_repository_url("HTTPS://Foo.COM/bar.GIT")
    'foo.com/bar'
    """
    canonical = _strip_affixes(url)
    while True:
        stripped = _strip_affixes(canonical)
        if stripped == canonical:
            return canonical
        canonical = stripped
