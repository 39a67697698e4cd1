"""
Client-facing error messages.

Every route raises errors by message code; the text returned in the
``{"error": ...}`` body is looked up here for the configured locale.
"""
from typing import Dict, Optional

from app.core.config import settings

DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "unauthorized": "Unauthorized",
        "user_not_found": "User not found",
        "follow_target_not_found": "User to follow not found",
        "unfollow_target_not_found": "User to unfollow not found",
        "post_not_found": "Post not found",
        "comment_not_found": "Comment not found",
        "field_required": "{field} is required",
        "invalid_request": "Invalid request",
        "content_required": "content is required",
        "image_required": "Please select an image file",
        "file_too_large": "File exceeds the 5MB limit (current: {size_mb}MB)",
        "unsupported_image_type": "Unsupported file type. Only JPEG, PNG, WebP and GIF are allowed",
        "caption_too_long": "Caption may be at most {max_length} characters",
        "cannot_follow_self": "Cannot follow yourself",
        "already_liked": "Already liked",
        "already_following": "Already following",
        "comment_forbidden": "Forbidden: You can only delete your own comments",
        "post_forbidden": "Forbidden: You can only delete your own posts",
        "posts_fetch_failed": "Failed to fetch posts",
        "comments_fetch_failed": "Failed to fetch comments",
        "post_create_failed": "Failed to create post",
        "image_upload_failed": "Failed to upload image",
        "image_url_failed": "Failed to get image URL",
        "like_create_failed": "Failed to create like",
        "like_delete_failed": "Failed to delete like",
        "follow_create_failed": "Failed to create follow",
        "follow_delete_failed": "Failed to delete follow",
        "comment_create_failed": "Failed to create comment",
        "comment_delete_failed": "Failed to delete comment",
        "post_delete_failed": "Failed to delete post",
        "user_sync_failed": "Failed to sync user",
        "media_not_found": "File not found",
        "internal_error": "Internal server error",
    },
    "ko": {
        "unauthorized": "로그인이 필요합니다.",
        "user_not_found": "사용자를 찾을 수 없습니다.",
        "follow_target_not_found": "팔로우할 사용자를 찾을 수 없습니다.",
        "unfollow_target_not_found": "언팔로우할 사용자를 찾을 수 없습니다.",
        "post_not_found": "게시물을 찾을 수 없습니다.",
        "comment_not_found": "댓글을 찾을 수 없습니다.",
        "field_required": "{field} 값이 필요합니다.",
        "invalid_request": "잘못된 요청입니다.",
        "content_required": "댓글 내용을 입력해주세요.",
        "image_required": "이미지 파일을 선택해주세요.",
        "file_too_large": "파일 크기가 5MB를 초과합니다. (현재: {size_mb}MB)",
        "unsupported_image_type": "지원하지 않는 파일 형식입니다. JPEG, PNG, WebP, GIF만 업로드 가능합니다.",
        "caption_too_long": "캡션은 최대 {max_length}자까지 입력 가능합니다.",
        "cannot_follow_self": "자기 자신을 팔로우할 수 없습니다.",
        "already_liked": "이미 좋아요한 게시물입니다.",
        "already_following": "이미 팔로우 중입니다.",
        "comment_forbidden": "본인이 작성한 댓글만 삭제할 수 있습니다.",
        "post_forbidden": "본인이 작성한 게시물만 삭제할 수 있습니다.",
        "posts_fetch_failed": "게시물을 불러오는데 실패했습니다.",
        "comments_fetch_failed": "댓글을 불러오는데 실패했습니다.",
        "post_create_failed": "게시물 생성에 실패했습니다.",
        "image_upload_failed": "이미지 업로드에 실패했습니다.",
        "image_url_failed": "이미지 URL을 가져오는데 실패했습니다.",
        "like_create_failed": "좋아요에 실패했습니다.",
        "like_delete_failed": "좋아요 취소에 실패했습니다.",
        "follow_create_failed": "팔로우에 실패했습니다.",
        "follow_delete_failed": "언팔로우에 실패했습니다.",
        "comment_create_failed": "댓글 작성에 실패했습니다.",
        "comment_delete_failed": "댓글 삭제에 실패했습니다.",
        "post_delete_failed": "게시물 삭제에 실패했습니다.",
        "user_sync_failed": "사용자 동기화에 실패했습니다.",
        "media_not_found": "파일을 찾을 수 없습니다.",
        "internal_error": "서버 오류가 발생했습니다. 잠시 후 다시 시도해주세요.",
    },
}


def get_message(code: str, locale: Optional[str] = None, **params) -> str:
    """Return the message for ``code`` in ``locale``, falling back to English, then to the code itself."""
    table = MESSAGES.get(locale or settings.LOCALE) or MESSAGES[DEFAULT_LOCALE]
    template = table.get(code) or MESSAGES[DEFAULT_LOCALE].get(code, code)
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template
