import base64
import json
import pickle
import typing as tp

from ._models import KNOWN_RESPONSE_EXTENSIONS, CachedResponse
from ._utils import HEADERS_ENCODING

try:
    import yaml
except ImportError:  # pragma: no cover
    yaml = None  # type: ignore

__all__ = ("PickleSerializer", "JSONSerializer", "YAMLSerializer", "BaseSerializer")


def _to_dict(response: CachedResponse) -> tp.Dict[str, tp.Any]:
    return {
        "url": response.url,
        "status": response.status_code,
        "headers": [
            (key.decode(HEADERS_ENCODING), value.decode(HEADERS_ENCODING)) for key, value in response.headers
        ],
        "content": base64.b64encode(response.content).decode("ascii"),
        "extensions": {
            key: value.decode(HEADERS_ENCODING)
            for key, value in response.extensions.items()
            if key in KNOWN_RESPONSE_EXTENSIONS
        },
        "created_at": response.created_at,
    }


def _from_dict(data: tp.Dict[str, tp.Any]) -> CachedResponse:
    return CachedResponse(
        url=data["url"],
        status_code=data["status"],
        headers=tuple(
            (key.encode(HEADERS_ENCODING), value.encode(HEADERS_ENCODING)) for key, value in data["headers"]
        ),
        content=base64.b64decode(data["content"].encode("ascii")),
        extensions={
            key: value.encode(HEADERS_ENCODING)
            for key, value in data["extensions"].items()
            if key in KNOWN_RESPONSE_EXTENSIONS
        },
        created_at=data["created_at"],
    )


class BaseSerializer:
    def dumps(self, response: CachedResponse) -> tp.Union[str, bytes]:
        raise NotImplementedError()

    def loads(self, data: tp.Union[str, bytes]) -> CachedResponse:
        raise NotImplementedError()

    @property
    def is_binary(self) -> bool:
        raise NotImplementedError()


class PickleSerializer(BaseSerializer):
    """
    A simple pickle-based serializer.
    """

    def dumps(self, response: CachedResponse) -> tp.Union[str, bytes]:
        """
        Dumps the stored response.

        :param response: A stored response
        :type response: CachedResponse
        :return: Serialized response
        :rtype: tp.Union[str, bytes]
        """
        return pickle.dumps(response)

    def loads(self, data: tp.Union[str, bytes]) -> CachedResponse:
        """
        Loads the stored response from serialized data.

        :param data: Serialized data
        :type data: tp.Union[str, bytes]
        :return: The stored response
        :rtype: CachedResponse
        """
        assert isinstance(data, bytes)
        return tp.cast(CachedResponse, pickle.loads(data))

    @property
    def is_binary(self) -> bool:  # pragma: no cover
        return True


class JSONSerializer(BaseSerializer):
    """A simple json-based serializer."""

    def dumps(self, response: CachedResponse) -> tp.Union[str, bytes]:
        """
        Dumps the stored response.

        :param response: A stored response
        :type response: CachedResponse
        :return: Serialized response
        :rtype: tp.Union[str, bytes]
        """
        return json.dumps({"response": _to_dict(response)}, indent=4)

    def loads(self, data: tp.Union[str, bytes]) -> CachedResponse:
        """
        Loads the stored response from serialized data.

        :param data: Serialized data
        :type data: tp.Union[str, bytes]
        :return: The stored response
        :rtype: CachedResponse
        """
        return _from_dict(json.loads(data)["response"])

    @property
    def is_binary(self) -> bool:
        return False


class YAMLSerializer(BaseSerializer):
    """A simple yaml-based serializer."""

    def dumps(self, response: CachedResponse) -> tp.Union[str, bytes]:
        """
        Dumps the stored response.

        :param response: A stored response
        :type response: CachedResponse
        :raises RuntimeError: When used without the `yaml` extension installed
        :return: Serialized response
        :rtype: tp.Union[str, bytes]
        """
        if yaml is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `cachewarden` installed with the `yaml` extension as shown.\n"
                "```pip install cachewarden[yaml]```"
            )
        return yaml.safe_dump({"response": _to_dict(response)}, sort_keys=False)

    def loads(self, data: tp.Union[str, bytes]) -> CachedResponse:
        """
        Loads the stored response from serialized data.

        :param data: Serialized data
        :type data: tp.Union[str, bytes]
        :raises RuntimeError: When used without the `yaml` extension installed
        :return: The stored response
        :rtype: CachedResponse
        """
        if yaml is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `cachewarden` installed with the `yaml` extension as shown.\n"
                "```pip install cachewarden[yaml]```"
            )
        return _from_dict(yaml.safe_load(data)["response"])

    @property
    def is_binary(self) -> bool:  # pragma: no cover
        return False
