# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AssetKind(str, Enum):
    AVATAR = "avatar"
    COVER = "cover"


@dataclass(slots=True, frozen=True)
class RemoteAsset:
    """An object held by the remote store.

    ``remote_id`` is the opaque handle used for deletion, ``url`` the public
    address stored on the user record.
    """

    kind: AssetKind
    remote_id: str
    url: str
