"""Known keyboard variants."""

from uhkupdate.firmware.models import DeviceVariant


UHK_VENDOR_ID = 0x1D50

# Interface carrying the UHK command protocol
COMMAND_INTERFACE_NUMBER = 0

UHK60_V1_RIGHT = DeviceVariant(
    id=1,
    name="uhk60-right",
    display_name="UHK 60 v1",
    vendor_id=UHK_VENDOR_ID,
    keyboard_product_id=0x6122,
    bootloader_product_id=0x6120,
)

UHK60_V2_RIGHT = DeviceVariant(
    id=2,
    name="uhk60v2-right",
    display_name="UHK 60 v2",
    vendor_id=UHK_VENDOR_ID,
    keyboard_product_id=0x6124,
    bootloader_product_id=0x6123,
)

KNOWN_VARIANTS: tuple[DeviceVariant, ...] = (UHK60_V1_RIGHT, UHK60_V2_RIGHT)


def get_variant_by_name(name: str) -> DeviceVariant | None:
    """Look up a known variant by its name (e.g. ``uhk60v2-right``)."""
    for variant in KNOWN_VARIANTS:
        if variant.name == name:
            return variant
    return None


def get_variant_by_usb_id(vendor_id: int, product_id: int) -> DeviceVariant | None:
    """Look up a known variant by the USB ids of its keyboard interface."""
    for variant in KNOWN_VARIANTS:
        if variant.vendor_id == vendor_id and variant.keyboard_product_id == product_id:
            return variant
    return None


def match_usb_id(vendor_id: int, product_id: int) -> tuple[DeviceVariant, bool] | None:
    """Match USB ids against keyboard and bootloader ids of known variants.

    Returns:
        (variant, bootloader_mode) or None if the ids are unknown
    """
    variant = get_variant_by_usb_id(vendor_id, product_id)
    if variant is not None:
        return variant, False
    for variant in KNOWN_VARIANTS:
        if (
            variant.vendor_id == vendor_id
            and variant.bootloader_product_id == product_id
        ):
            return variant, True
    return None


def variant_names() -> list[str]:
    return [variant.name for variant in KNOWN_VARIANTS]
