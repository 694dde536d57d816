from unittest.mock import patch

import cloudinary.exceptions
import pytest

import media
from settings import Settings

CLOUDINARY_SETTINGS = Settings(
    cloudinary_cloud_name="demo-cloud",
    cloudinary_api_key="key-123",
    cloudinary_api_secret="secret-xyz",
)


def test_upload_image_passes_folder_and_transformation():
    # 1. Arrange
    result = {"secure_url": "https://res.cloudinary.com/demo/logo.png", "public_id": "company_logos/logo"}

    # 2. Act
    with patch("media.get_settings", return_value=CLOUDINARY_SETTINGS), \
         patch("media.cloudinary.config") as mock_config, \
         patch("media.cloudinary.uploader.upload", return_value=result) as mock_upload:
        asset = media.upload_image(
            "data:image/png;base64,AAAA", folder="company_logos", transformation=media.LOGO_TRANSFORMATION
        )

    # 3. Assert
    assert asset == media.UploadedAsset(**result)
    mock_config.assert_called_once_with(
        cloud_name="demo-cloud", api_key="key-123", api_secret="secret-xyz", secure=True
    )
    mock_upload.assert_called_once_with(
        "data:image/png;base64,AAAA",
        folder="company_logos",
        use_filename=True,
        unique_filename=False,
        overwrite=True,
        transformation=[{"width": 200, "height": 200, "crop": "fill"}],
    )


def test_upload_error_becomes_media_error():
    with patch("media.get_settings", return_value=CLOUDINARY_SETTINGS), \
         patch("media.cloudinary.config"), \
         patch("media.cloudinary.uploader.upload", side_effect=cloudinary.exceptions.Error("Invalid image file")):
        with pytest.raises(media.MediaError):
            media.upload_image("AAAA")


def test_upload_without_credentials_raises():
    with patch("media.get_settings", return_value=Settings()), \
         patch("media.cloudinary.uploader.upload") as mock_upload:
        with pytest.raises(media.MediaError):
            media.upload_image("AAAA")

    mock_upload.assert_not_called()


def test_delete_image_quietly_swallows_host_errors():
    with patch("media.get_settings", return_value=CLOUDINARY_SETTINGS), \
         patch("media.cloudinary.config"), \
         patch("media.cloudinary.uploader.destroy", side_effect=cloudinary.exceptions.Error("down")) as mock_destroy:
        media.delete_image_quietly("company_logos/logo")

    mock_destroy.assert_called_once_with("company_logos/logo")


def test_delete_image_quietly_skips_empty_id():
    with patch("media.cloudinary.uploader.destroy") as mock_destroy:
        media.delete_image_quietly(None)

    mock_destroy.assert_not_called()
