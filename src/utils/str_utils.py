import re
from typing import Callable
from functools import reduce

def camel_to_snake(str):
    return reduce(lambda x, y: x + ('_' if y.isupper() else '') + y, str).lower()

def humanize_field(name: str) -> str:
    """
    Turns a field key into a label for error summaries.

    >>> humanize_field('projectName')
    'Project Name'
    >>> humanize_field('podium_levels')
    'Podium Levels'
    """
    if not name:
        return name
    return camel_to_snake(name).replace('_', ' ').title()

def generate_slug(title: str) -> str:
    """
    Lowercases, strips anything but letters, digits, whitespace and hyphens,
    trims and joins the words with single hyphens.

    >>> generate_slug("  Top 10 Tips: Buying in 2024!  ")
    'top-10-tips-buying-in-2024'
    """
    slug = (title or "").lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = slug.strip()
    return re.sub(r'\s+', '-', slug)

def unique_slug(base: str, is_taken: Callable[[str], bool]) -> str:
    """
    First of `base`, `base-2`, `base-3`, ... that `is_taken` rejects.
    """
    slug = base
    suffix = 2
    while is_taken(slug):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug
