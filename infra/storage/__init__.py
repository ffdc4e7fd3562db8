from .s3_file_fetcher import S3FileFetcher

__all__ = ["S3FileFetcher"]
