from rich import print
import argparse

from config.config import settings
from logger import logger
from gcp.db import FirestoreStore
from utils.str_utils import generate_slug, unique_slug

def derive_slug(document: dict, taken: set) -> str:
    """
    Slug for a post that has none. A numeric suffix is appended when another
    post already uses the slug.

    Args:
        document (dict): Raw blog post document.
        taken (set): Slugs already in use, updated in place.

    Returns:
        str: The new slug, or an empty string when the post has no title.
    """
    base = generate_slug(document.get('title') or '')
    if not base:
        return ''
    slug = unique_slug(base, lambda candidate: candidate in taken)
    taken.add(slug)
    return slug

def backfill_blog_slugs(store: FirestoreStore, dry_run: bool = False) -> dict:
    collection = settings.GCP.Firestore.BLOG_COLLECTION_NAME
    documents = store.stream(collection)
    taken = {document['slug'] for document in documents if document.get('slug')}
    updated = {}

    for document in documents:
        if document.get('slug'):
            continue
        slug = derive_slug(document, taken)
        if not slug:
            logger.warning(f"Blog post {document['id']} - No title, cannot derive a slug")
            continue
        if dry_run:
            logger.info(f"Blog post {document['id']} - Would set slug '{slug}'")
        else:
            store.update(collection, document['id'], {'slug': slug})
            logger.info(f"Blog post {document['id']} - Set slug '{slug}'")
        updated[document['id']] = slug

    return updated

def main():
    parser = argparse.ArgumentParser(description="Blog Slug Backfiller")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Only print the slugs that would be written")

    args = parser.parse_args()

    store = FirestoreStore(
        project_id=settings.GCP.PROJECT_ID,
        database=settings.GCP.Firestore.DB,
        key_file_path=settings.GCP.SERVICE_ACCOUNT_KEY_FILE
    )
    updated = backfill_blog_slugs(store=store, dry_run=args.dry_run)
    print(updated)
    print(f"{'Would update' if args.dry_run else 'Updated'} {len(updated)} blog post(s)")

if __name__ == '__main__':
    main()
