from .json_data_source import JsonDataSource

__all__ = ["JsonDataSource"]
