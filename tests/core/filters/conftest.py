import pytest

from core.models.image import ImageRecord


@pytest.fixture
def make_image():
    def _make(image_id: str, name: str, tags: list[str] | None = None, created_at: str | None = None) -> ImageRecord:
        return ImageRecord(
            image_id=image_id,
            user_id="usr_1",
            name=name,
            url=f"https://cdn.example.com/{image_id}.png",
            storage_key=f"organizer/usr_1/root/{image_id}.png",
            size=10,
            format="png",
            tags=tags or [],
            created_at=created_at or "2024-01-01T00:00:00.000000+00:00",
        )

    return _make
