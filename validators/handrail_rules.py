from rise_profile import calculate_rise_at_distance, normalize_overrides, ARC_KEY_SCALE

# Matches the warning threshold of the override review
LARGE_DIFFERENCE = 0.5


class HandrailValidator:
    """Sanity checks on spiral handrail parameters and manual rise data."""

    @staticmethod
    def check_parameters(config) -> list[str]:
        """
        Validate the handrail parameters.

        The rise engine itself accepts anything numeric; these are the ranges a
        physically buildable rail needs.
        """
        issues = []

        for key, label in (("total_degrees", "Total angular span"),
                           ("total_helical_rise", "Total helical rise"),
                           ("total_arc_distance", "Total arc distance")):
            if not config[key] > 0:
                issues.append(f"{label} must be greater than 0 (got {config[key]})")

        segments = config["total_segments"]
        if not segments > 0:
            issues.append(f"Total segments must be greater than 0 (got {segments})")

        if config["pitch_block"] < 0:
            issues.append(f"Pitch block height {config['pitch_block']:.3f}\" cannot be negative")

        if config["bottom_length"] < 0 or config["top_length"] < 0:
            issues.append("Easement lengths cannot be negative")
        elif segments > 0 and config["bottom_length"] + config["top_length"] > segments:
            issues.append(
                f"Easements ({config['bottom_length']} + {config['top_length']} segments) "
                f"overlap on a {segments}-segment rail"
            )

        if config["total_arc_distance"] > 0:
            final = calculate_rise_at_distance(config["total_arc_distance"], config["total_helical_rise"],
                                               config["total_arc_distance"], config["pitch_block"])
            expected = config["pitch_block"] + config["total_helical_rise"]
            if abs(final - expected) >= 0.001:
                issues.append(f"End height {final:.3f}\" does not match pitch block + helical rise {expected:.3f}\"")

        return issues

    @staticmethod
    def check_overrides(config, manual_overrides) -> list[str]:
        """Flag overrides past the end of the arc or far from the calculated rise."""
        issues = []
        total_arc = config["total_arc_distance"]

        for key, rise in sorted(normalize_overrides(manual_overrides).items()):
            arc = key / ARC_KEY_SCALE
            if arc > total_arc:
                issues.append(f"Override at {arc:.3f}\" is past the arc end {total_arc:.3f}\" and is ignored")
                continue
            calc = calculate_rise_at_distance(arc, config["total_helical_rise"], total_arc, config["pitch_block"])
            if abs(rise - calc) > LARGE_DIFFERENCE:
                issues.append(f"Override at {arc:.3f}\" ({rise:.3f}\") differs from calculated {calc:.3f}\" "
                              f"by {abs(rise - calc):.3f}\"")

        return issues
