"""Construction of the fixed update plan."""

from uhkupdate.firmware.models import (
    FlashLeftStep,
    FlashRightStep,
    Layout,
    ResolvedArtifacts,
    SwitchKeymapStep,
    UpdatePlan,
    UpdateStep,
    WriteHardwareConfigStep,
    WriteUserConfigStep,
)


# Keymap shipped with the factory configuration for the post-update key test
FACTORY_TEST_KEYMAP = "TES"

STEP_ORDER: tuple[UpdateStep, ...] = tuple(UpdateStep)


def build_update_plan(
    artifacts: ResolvedArtifacts,
    layout: Layout,
    keymap: str = FACTORY_TEST_KEYMAP,
) -> UpdatePlan:
    """Build the five-step update plan.

    Args:
        artifacts: Validated artifact paths
        layout: Validated layout
        keymap: Abbreviation of the keymap to activate last

    Returns:
        UpdatePlan whose steps follow STEP_ORDER
    """
    return UpdatePlan(
        steps=(
            FlashRightStep(image_path=artifacts.right_firmware_path),
            FlashLeftStep(image_path=artifacts.left_firmware_path),
            WriteUserConfigStep(config_path=artifacts.user_config_path),
            WriteHardwareConfigStep(is_iso=layout.is_iso),
            SwitchKeymapStep(keymap=keymap),
        )
    )
