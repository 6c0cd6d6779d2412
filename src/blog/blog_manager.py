from typing import Any, Dict, List, Optional, Union

from logger import logger
from config.config import settings
from database.repository.base_repository import BaseRepository
from gcp.db import DocumentNotFoundError
from gcp.storage import StorageManager
from gcp.storage_model import UploadedFile
from blog.blog_model import BlogPost
from utils.common_models import ActionResult
from utils.str_utils import unique_slug


class BlogManager(BaseRepository[BlogPost]):
    model = BlogPost
    collection = settings.GCP.Firestore.BLOG_COLLECTION_NAME
    order_by = 'createdAt'
    descending = True
    entity_name = "Blog post"

    def list_posts(self) -> ActionResult[List[BlogPost]]:
        return self.get_all()

    def get_post(self, post_id: str) -> ActionResult[BlogPost]:
        return self.get_by_id(post_id)

    def get_post_by_slug(self, slug: str) -> ActionResult[BlogPost]:
        try:
            matches = self.store.find(self.collection, 'slug', slug)
            if not matches:
                raise DocumentNotFoundError("Blog post not found")
            if len(matches) > 1:
                logger.warning(f"[BLOG_MANAGER] {len(matches)} posts share slug '{slug}', using the first")
            return ActionResult.ok(self._to_model(matches[0]))
        except Exception as e:
            logger.error(f"[BLOG_MANAGER] Failed to get blog post by slug '{slug}': {e}")
            return ActionResult.fail(self._error_message(e, "Failed to fetch blog post"))

    def _slug_taken(self, slug: str, post_id: Optional[str] = None) -> bool:
        return any(match['id'] != post_id for match in self.store.find(self.collection, 'slug', slug))

    def _with_unique_slug(self, post: BlogPost, post_id: Optional[str] = None) -> BlogPost:
        if not post.slug:
            return post
        slug = unique_slug(post.slug, lambda candidate: self._slug_taken(candidate, post_id))
        if slug != post.slug:
            logger.info(f"[BLOG_MANAGER] Slug '{post.slug}' is in use, saving as '{slug}'")
        return post.model_copy(update={'slug': slug})

    def add_post(self, post: BlogPost) -> ActionResult[str]:
        # slug is derived from the title by the model when left blank
        try:
            post = self._with_unique_slug(post)
        except Exception as e:
            logger.error(f"[BLOG_MANAGER] Failed to check slug '{post.slug}': {e}")
            return ActionResult.fail(self._error_message(e, "Failed to create blog post"))
        return self.create(post)

    def update_post(self, post_id: str, post: Union[BlogPost, Dict[str, Any]]) -> ActionResult[str]:
        if isinstance(post, BlogPost):
            try:
                post = self._with_unique_slug(post, post_id)
            except Exception as e:
                logger.error(f"[BLOG_MANAGER] Failed to check slug '{post.slug}': {e}")
                return ActionResult.fail(self._error_message(e, "Failed to update blog post"))
        return self.update(post_id, post)

    def update_post_by_slug(self, slug: str, post: BlogPost) -> ActionResult[str]:
        found = self.get_post_by_slug(slug)
        if not found.success:
            return ActionResult.fail(found.error)
        return self.update_post(found.data.id, post)

    def delete_post(self, post_id: str) -> ActionResult[str]:
        return self.delete(post_id)

    def upload_blog_image(self, file: Optional[UploadedFile], blog_id: Optional[str] = None) -> ActionResult[str]:
        return self._upload_file(
            file,
            lambda filename: StorageManager.blog_image_path(blog_id, filename)
        )

    def delete_blog_image(self, image_path: str) -> ActionResult[str]:
        return self._delete_file(image_path)
