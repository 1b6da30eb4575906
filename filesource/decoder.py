"""
Turn the bytes of one config file into a Pod.

Each entry of INTERPRETERS first decides whether a parsed document is in
its format, and only then validates it. The first interpreter that
recognizes the document owns it: its validation error is final. A third
format is supported by appending to INTERPRETERS.
"""

from __future__ import annotations
import json
from typing import Any, Optional, Protocol, Sequence

import yaml
from pydantic import BaseModel, ValidationError

from .errors import InvalidDeclaration, UnrecognizedDeclaration
from .schemas import ContainerManifest, Pod, is_dns_subdomain
from .utils import default_hostname, get_logger, md5_hex

logger = get_logger("decoder")

DEFAULT_NAMESPACE = "default"
CONFIG_SOURCE_ANNOTATION = "config.source"
FILE_SOURCE = "file"


class SchemaInterpreter(Protocol):
    name: str

    def recognize(self, doc: Any) -> Optional[str]:
        """Return None if `doc` is in this format, otherwise why it is not."""
        ...

    def build(self, doc: Any) -> Pod:
        """Validate a recognized document; raises pydantic.ValidationError."""
        ...


class ManifestInterpreter:
    name = "manifest"

    def recognize(self, doc: Any) -> Optional[str]:
        if not isinstance(doc, dict):
            return f"expected a mapping, got {type(doc).__name__}"
        if "kind" in doc:
            return f"has kind {doc['kind']!r}, manifests carry no kind"
        if "version" not in doc:
            return "missing 'version' field"
        return None

    def build(self, doc: Any) -> Pod:
        return ContainerManifest.model_validate(doc).to_pod()


class PodInterpreter:
    name = "pod"

    def recognize(self, doc: Any) -> Optional[str]:
        if not isinstance(doc, dict):
            return f"expected a mapping, got {type(doc).__name__}"
        if "kind" not in doc:
            return "missing 'kind' field"
        if doc["kind"] != "Pod":
            return f"kind {doc['kind']!r} is not 'Pod'"
        return None

    def build(self, doc: Any) -> Pod:
        return Pod.model_validate(doc)


INTERPRETERS: Sequence[SchemaInterpreter] = (ManifestInterpreter(), PodInterpreter())


def _short_errors(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
    )


def _canonical(model: BaseModel) -> str:
    return json.dumps(model.model_dump(mode="json", by_alias=True), sort_keys=True)


def apply_defaults(pod: Pod, filename: str, hostname: str) -> Pod:
    """Fill in identity fields a file may leave out.

    The uid is derived from the host, the file path and the pod content so
    it is stable across polls of an unchanged file. Names get the host
    appended so the same file on two hosts never collides.
    """
    meta = pod.metadata
    uid = meta.uid or md5_hex([f"host:{hostname}", f"file:{filename}", _canonical(pod)])
    name = f"{meta.name or uid}-{hostname}"
    if not is_dns_subdomain(name):
        raise ValueError(f"generated name {name!r} is not a DNS subdomain")
    annotations = {**meta.annotations, CONFIG_SOURCE_ANNOTATION: FILE_SOURCE}
    data = pod.model_dump(by_alias=True)
    data["metadata"].update(
        uid=uid,
        name=name,
        namespace=meta.namespace or DEFAULT_NAMESPACE,
        annotations=annotations,
    )
    return Pod.model_validate(data)


def decode(data: bytes, filename: str, hostname: str | None = None,
           interpreters: Sequence[SchemaInterpreter] = INTERPRETERS) -> Pod:
    """Decode one declaration, trying each interpreter in order.

    Raises InvalidDeclaration when an interpreter recognizes the content
    but rejects it, UnrecognizedDeclaration when none recognizes it.
    """
    hostname = hostname or default_hostname()
    content = data.decode("utf-8", errors="replace")
    try:
        doc = yaml.safe_load(content)
    except (yaml.YAMLError, RecursionError) as e:
        reason = f"not valid YAML: {e}"
        raise UnrecognizedDeclaration(filename, content, [(i.name, reason) for i in interpreters]) from e

    reasons = []
    for interp in interpreters:
        why = interp.recognize(doc)
        if why is not None:
            reasons.append((interp.name, why))
            continue
        try:
            pod = interp.build(doc)
            return apply_defaults(pod, filename, hostname)
        except ValidationError as e:
            raise InvalidDeclaration(filename, interp.name, _short_errors(e)) from e
        except (ValueError, RecursionError) as e:
            raise InvalidDeclaration(filename, interp.name, str(e)) from e
    raise UnrecognizedDeclaration(filename, content, reasons)


def decode_file(path: str, hostname: str | None = None) -> Pod:
    logger.debug(f"Reading config file {path!r}")
    with open(path, "rb") as f:
        data = f.read()
    return decode(data, path, hostname)
