"""Decoding of base64-encoded ZIP archives into filename to content maps."""

import base64
import binascii
import io
import zipfile
import zlib


def decode_zip_archive(encoded: str) -> dict[str, str]:
    """
    Decode a URL-safe base64 ZIP archive (padding optional).

    Returns:
        Mapping of filename to UTF-8 file content; directories are skipped

    Raises:
        ValueError: If the string is not base64, not a ZIP archive, or a file
            is not valid UTF-8
    """
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        archive_bytes = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Couldn't decode ZIP string: {exc}") from exc

    try:
        archive = zipfile.ZipFile(io.BytesIO(archive_bytes))
    except zipfile.BadZipFile as exc:
        raise ValueError(f"Couldn't open ZIP archive: {exc}") from exc

    files: dict[str, str] = {}
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                files[info.filename] = archive.read(info).decode("utf-8")
            except (
                zipfile.BadZipFile,
                zlib.error,
                # unsupported compression method
                NotImplementedError,
                # encrypted member read without a password
                RuntimeError,
                UnicodeDecodeError,
            ) as exc:
                raise ValueError(
                    f"Couldn't read file in ZIP archive: {info.filename}: {exc}"
                ) from exc
    return files


__all__ = ["decode_zip_archive"]
