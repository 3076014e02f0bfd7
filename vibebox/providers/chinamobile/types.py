"""China Mobile Cloud ECS API types.

TypedDicts for request and response payloads - no conversion needed.
Keys keep the vendor's camelCase spelling.
"""

from __future__ import annotations

from typing import Literal, NotRequired, TypedDict

type ResponseState = Literal["OK", "ERROR", "EXCEPTION", "ALARM", "FORBIDDEN"]
type ChargeMode = Literal["HOUR", "MONTH", "YEAR"]
type VolumeType = Literal["highPerformance", "ssd", "normal"]


class Envelope(TypedDict):
    """Standard wrapper around every API response."""

    requestId: str
    state: ResponseState
    body: NotRequired[object]
    errorCode: NotRequired[str]
    errorMessage: NotRequired[str]
    errorParams: NotRequired[list[str]]


class BootVolume(TypedDict):
    size: int
    volumeType: VolumeType


class PrivateNetwork(TypedDict):
    networkId: str
    portType: int


class CreateInstanceRequest(TypedDict):
    zoneId: str
    chargeMode: ChargeMode
    flavorName: str
    bootVolume: BootVolume
    imageId: str
    privateNetwork: PrivateNetwork
    instanceName: str
    password: str  # RSA encrypted, base64
    quantity: int


class CreateInstanceResponse(TypedDict):
    orderId: str
    instanceIds: list[str]


class InstancePort(TypedDict):
    id: str
    privateIp: list[str]
    publicIp: NotRequired[list[str]]
    macAddress: str
    vpcName: str
    subnetName: str


class VolumeInfo(TypedDict):
    id: str
    name: str
    size: int
    type: str
    status: str


class InstanceDetails(TypedDict):
    """describe-instance body."""

    id: str
    instanceName: str
    status: str
    flavorName: str
    cpu: int
    memory: int  # MB
    disk: int  # GB
    zoneId: str
    imageId: str
    imageName: str
    chargeMode: str
    createdTime: str
    modifiedTime: str
    ports: list[InstancePort]
    bootVolumeId: str
    bootVolumeType: str
    volumes: NotRequired[list[VolumeInfo]]
    recycle: bool


class DeleteInstancesRequest(TypedDict):
    instanceIds: list[str]
    deletePublicNetwork: bool
    deleteDataVolumes: bool


class BatchInstancesRequest(TypedDict):
    """start, stop and reboot share this body."""

    instanceIds: list[str]


class BatchOperationResult(TypedDict):
    instanceId: str
    result: bool
    message: str


class BatchOperationResponse(TypedDict):
    instanceBatchResult: list[BatchOperationResult]


class FlavorResponse(TypedDict):
    flavorName: str
    flavorType: str
    cpu: int
    ram: int  # MB


class FlavorsResponse(TypedDict):
    flavors: list[FlavorResponse]


class InstanceSummary(TypedDict):
    """Entry of the paged instance listing."""

    id: str
    name: NotRequired[str]
    status: int | str
    specsName: NotRequired[str]
    zoneId: NotRequired[str]
    createdTime: NotRequired[str]


class InstanceListResponse(TypedDict):
    totalCount: int
    content: list[InstanceSummary]


class ZoneResponse(TypedDict):
    zoneId: NotRequired[str]
    zoneName: NotRequired[str]
    region: NotRequired[str]


class AuthParams(TypedDict):
    AccessKey: str
    Signature: str
    SignatureMethod: Literal["HmacSHA1"]
    SignatureVersion: Literal["V2.0"]
    SignatureNonce: str
    Timestamp: str
    Version: Literal["2016-12-05"]
