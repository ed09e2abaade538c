# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple


@dataclass(frozen=True)
class MountRecord:
    """A mounted filesystem, i.e. one line of /proc/mounts.

    https://man7.org/linux/man-pages/man5/fstab.5.html
    """

    # e.g. /dev/sda1
    device: str
    # e.g. /mnt/disk
    mount_point: str
    # e.g. ext4
    file_system_type: str
    # e.g. ("ro", "nosuid"), in the order the kernel lists them
    options: Tuple[str, ...]

    def __post_init__(self) -> None:
        # accept any iterable of options but store an immutable tuple
        options: Iterable[str] = self.options
        object.__setattr__(self, "options", tuple(options))

    def __str__(self) -> str:
        """Render the record like `mount(8)` does when listing mounts.

        >>> str(MountRecord("/dev/sda1", "/mnt/disk", "ext4", ("ro", "nosuid")))
        '/dev/sda1 on /mnt/disk type ext4 (ro,nosuid)'
        """
        return "{} on {} type {} ({})".format(
            self.device,
            self.mount_point,
            self.file_system_type,
            ",".join(self.options),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device": self.device,
            "mount_point": self.mount_point,
            "file_system_type": self.file_system_type,
            "options": list(self.options),
        }
