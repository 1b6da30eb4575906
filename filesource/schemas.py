## filesource/schemas.py

from __future__ import annotations
import re
from typing import Dict, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
DNS_LABEL_MAX = 63
DNS_SUBDOMAIN_MAX = 253

RestartPolicy = Literal["Always", "OnFailure", "Never"]


def is_dns_label(value: str) -> bool:
    return len(value) <= DNS_LABEL_MAX and bool(DNS_LABEL.match(value))


def is_dns_subdomain(value: str) -> bool:
    return len(value) <= DNS_SUBDOMAIN_MAX and all(is_dns_label(p) for p in value.split("."))


def _dns_label(value: str) -> str:
    if not is_dns_label(value):
        raise ValueError(f"{value!r} is not a DNS label (lowercase alphanumerics and '-', at most {DNS_LABEL_MAX})")
    return value


def _dns_subdomain(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_dns_subdomain(value):
        raise ValueError(f"{value!r} is not a DNS subdomain (at most {DNS_SUBDOMAIN_MAX} chars)")
    return value


class _Model(BaseModel):
    # files use camelCase keys, attributes are snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ContainerPort(_Model):
    name: Optional[str] = None
    container_port: int = Field(ge=1, le=65535)
    host_port: Optional[int] = Field(default=None, ge=1, le=65535)
    protocol: Literal["TCP", "UDP"] = "TCP"


class EnvVar(_Model):
    name: str = Field(min_length=1)
    value: str = ""


class VolumeMount(_Model):
    name: str
    mount_path: str = Field(min_length=1)
    read_only: bool = False


class Volume(_Model):
    name: str
    source: Optional[Dict[str, object]] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _dns_label(v)


class Container(_Model):
    name: str
    image: str = Field(min_length=1)
    command: Tuple[str, ...] = ()
    working_dir: Optional[str] = None
    ports: Tuple[ContainerPort, ...] = ()
    env: Tuple[EnvVar, ...] = ()
    volume_mounts: Tuple[VolumeMount, ...] = ()
    image_pull_policy: Optional[Literal["Always", "Never", "IfNotPresent"]] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _dns_label(v)


def _check_workload(containers: Tuple[Container, ...], volumes: Tuple[Volume, ...]) -> None:
    """Cross-field rules shared by both declaration formats."""
    if not containers:
        raise ValueError("at least one container is required")
    names = [c.name for c in containers]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ValueError(f"duplicate container names: {dupes}")
    vols = [v.name for v in volumes]
    dupes = sorted({n for n in vols if vols.count(n) > 1})
    if dupes:
        raise ValueError(f"duplicate volume names: {dupes}")
    for c in containers:
        for m in c.volume_mounts:
            if m.name not in vols:
                raise ValueError(f"container {c.name!r} mounts undeclared volume {m.name!r}")


class ObjectMeta(_Model):
    name: Optional[str] = None
    namespace: Optional[str] = None
    uid: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "namespace")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return _dns_subdomain(v)


class PodSpec(_Model):
    containers: Tuple[Container, ...] = ()
    volumes: Tuple[Volume, ...] = ()
    restart_policy: RestartPolicy = "Always"

    @model_validator(mode="after")
    def check_workload(self) -> "PodSpec":
        _check_workload(self.containers, self.volumes)
        return self


class Pod(_Model):
    """A single workload declaration (Schema B, and the decoded form of both schemas)."""

    kind: Literal["Pod"] = "Pod"
    api_version: str = "v1beta1"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec


class ContainerManifest(_Model):
    """Legacy container manifest (Schema A)."""

    version: Literal["v1beta1"]
    id: Optional[str] = None
    uuid: Optional[str] = None
    containers: Tuple[Container, ...] = ()
    volumes: Tuple[Volume, ...] = ()
    restart_policy: RestartPolicy = "Always"

    @field_validator("id")
    @classmethod
    def check_id(cls, v: Optional[str]) -> Optional[str]:
        return _dns_subdomain(v)

    @model_validator(mode="after")
    def check_workload(self) -> "ContainerManifest":
        _check_workload(self.containers, self.volumes)
        return self

    def to_pod(self) -> Pod:
        return Pod(
            metadata=ObjectMeta(name=self.id, uid=self.uuid),
            spec=PodSpec(containers=self.containers, volumes=self.volumes, restart_policy=self.restart_policy),
        )
