"""Keyword catalog for explicit text detection.

Categories overlap on purpose ("porn" and "xxx" sit in both sexual and
pornography), and each listing counts as its own hit.
"""

EXPLICIT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "nudity": (
        "nude", "naked", "undressed", "topless", "bottomless", "bare",
        "exposed", "revealing", "strip", "bikini", "underwear", "lingerie",
    ),
    "sexual": (
        "sex", "sexual", "porn", "xxx", "adult", "erotic", "intimate",
        "orgasm", "masturbate", "horny", "sexy", "seduce", "arousal",
        "pleasure", "kinky", "fetish", "bdsm", "escort", "hookup",
    ),
    "pornography": (
        "pornography", "pornographic", "porn", "xxx", "adult film",
        "sex tape", "webcam", "camgirl", "onlyfans", "premium content",
        "adult content", "nsfw", "explicit", "mature content",
    ),
    "violence": (
        "violence", "violent", "fight", "attack", "assault", "abuse",
        "hit", "punch", "kick", "slap", "beat", "torture", "harm",
        "hurt", "wound", "injure", "threat", "weapon", "gun", "knife",
    ),
    "gore": (
        "gore", "blood", "bleeding", "wound", "injury", "death", "dead",
        "corpse", "murder", "kill", "suicide", "mutilation", "dismember",
        "brutal", "savage", "graphic", "disturbing", "gruesome",
    ),
}

CATEGORIES = tuple(EXPLICIT_KEYWORDS)
