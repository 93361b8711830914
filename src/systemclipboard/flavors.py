from enum import Enum


class DataFlavor(Enum):
    STRING = "text/plain;charset=utf-8"
    TEXT = "text/plain;charset=utf-8"
    FILE_LIST = "text/uri-list"
    IMAGE = "image/png"

    @property
    def mime_type(self) -> str:
        return self.value

    @property
    def human_name(self) -> str:
        return {
            "STRING": "Unicode String",
            "FILE_LIST": "File List",
            "IMAGE": "Image",
        }[self.name]
