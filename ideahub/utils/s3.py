import boto3
import uuid
import logging
from ideahub.core.config import settings

log = logging.getLogger("s3")

s3 = boto3.client("s3", region_name=settings.AWS_REGION)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def _avatar_key(user_id: str, ext: str) -> str:
    return f"{settings.AVATAR_PREFIX}/{user_id}/{uuid.uuid4()}.{ext}"


# Save avatar image to S3 and return the S3 key
async def save_user_avatar_to_s3(file_obj, filename: str, content_type: str, user_id: str) -> str:
    ext = ALLOWED_IMAGE_TYPES.get(content_type)
    if ext is None:
        ext = (filename.rsplit(".", 1)[-1] if "." in filename else "jpg").lower()
    key = _avatar_key(user_id, ext)
    file_obj.seek(0)
    s3.upload_fileobj(file_obj, settings.BUCKET_NAME, key, ExtraArgs={"ContentType": content_type})
    return key


def public_url_for_key(key: str) -> str:
    """Avatars live in a public-read prefix, so the URL is stable (no presigning)."""
    if settings.PUBLIC_BUCKET_URL:
        return f"{settings.PUBLIC_BUCKET_URL.rstrip('/')}/{key}"
    return f"https://{settings.BUCKET_NAME}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def key_from_public_url(url: str | None) -> str | None:
    if not url:
        return None
    marker = f"/{settings.AVATAR_PREFIX}/"
    idx = url.find(marker)
    if idx < 0:
        return None
    return url[idx + 1:]


# Delete file from S3
async def delete_file_from_s3(key: str) -> None:
    try:
        s3.delete_object(Bucket=settings.BUCKET_NAME, Key=key)
    except Exception as e:
        # Log error but don't fail if file doesn't exist
        log.warning("Failed to delete S3 file %s: %s", key, e)
