"""Canned prompt fragments used by the prompt composer.

Catalog keys are what the user picks; values are the text sent to the model.
"""

PLACEHOLDER_FILL_DIRECTIVE = (
    "Redraw the generated content onto the grey reference image. Outpaint any "
    "empty areas with matching content so the result fits the grey reference "
    "image's aspect ratio, completely covering and replacing every part of the "
    "grey reference (including its background colour). Keep only its aspect "
    "ratio; no grey background or border may remain visible"
)

OUTPAINT_GUARD = (
    "Final check: Before outputting, inspect all edges of the image. If any "
    "solid color borders are present (e.g., gray, black, white), you must "
    "outpaint to seamlessly extend the image content to fill those areas. The "
    "final image must not have any monochromatic borders."
)

DEFAULT_SUBJECT = "A character in a cyberpunk setting."

FACIAL_REPLICATION_DIRECTIVE = (
    "ABSOLUTE PRIORITY: FACIAL REPLICATION. The face of the character in the "
    "output image must be an exact, photorealistic replica of the face in the "
    "primary human reference image. This is not a suggestion, but a command. "
    "Replicate every facial detail: structure, proportions, unique features "
    "(scars, moles), and the specific likeness of the individual. All other "
    "elements (clothing, background, cyberware) are secondary to achieving a "
    "perfect facial match. Failure to replicate the face is a failure of the "
    "entire generation."
)

GROUP_PORTRAIT_DIRECTIVE = (
    "GROUP PORTRAIT DIRECTIVE: This is a group photo. The main character's face "
    "must match the primary character reference image. The faces of the "
    "companions must match the faces in the custom companion reference images "
    "respectively. Ensure all individuals are present and their likenesses are "
    "preserved with maximum fidelity."
)

CYBERNETIC_AUGMENTATION_DIRECTIVES = (
    "The character must have prominent, visible cybernetic interface lines and "
    "ports on their face and neck.",
    "Their body must feature significant cybernetic implants, such as a chrome "
    "arm, augmented legs, or visible integrated tech.",
)

CUSTOM_WEAPON_CLAUSE = (
    "The character is equipped with the custom weapon(s) shown in the reference images."
)

CUSTOM_COMPANION_CLAUSE = (
    "The character is accompanied by the custom companion(s) shown in the reference images."
)

CINEMATIC_REALISM_CLAUSE = (
    "8K hyper-realistic path-tracing, Unreal Engine 5 photoreal materials, "
    "cinematic lighting atmosphere, ultra realistic, 8K ray-tracing HDR"
)

ANATOMY_CLAUSE = (
    "The character must have realistic, well-proportioned human anatomy. Avoid "
    "exaggerated features like a large head or small body."
)

NEGATIVE_PROMPT_CLAUSE = (
    "Negative prompt: deformed, bad anatomy, disfigured, poorly drawn face, "
    "mutation, mutated, extra limb, ugly, poorly drawn hands, missing limb, "
    "floating limbs, disconnected limbs, malformed hands, blurry, mutated hands, "
    "fingers, out of focus, long neck, long body, nsfw, child, childish"
)

# Attribute fields of a scene draft and the label each gets in the prompt
ATTRIBUTE_LABELS: dict[str, str] = {
    "hair_style": "Hair Style",
    "hair_color": "Hair Color",
    "expression": "Expression",
    "headwear": "Headwear",
    "outerwear": "Outerwear",
    "innerwear": "Innerwear",
    "legwear": "Legwear",
    "footwear": "Footwear",
    "face_cyberware": "Face Cyberware",
    "body_cyberware": "Body Cyberware",
    "life_path": "Life Path",
}

DYNAMIC_ACTION_PROMPTS: tuple[str, ...] = (
    "mid-stride through a crowd, coat flaring as they glance back over one shoulder",
    "vaulting over a wrecked car hood with one hand, sparks trailing behind",
    "leaning against a neon-lit wall, lighting a cigarette with a chrome finger",
    "crouched on a rooftop ledge, scanning the streets below through a holo-scope",
    "turning sharply toward the camera, weapon half-raised, rain spraying off their shoulders",
    "walking away from an explosion without looking back",
    "sliding into cover behind a concrete barrier as tracer fire passes overhead",
    "standing in the doorway of a bar, silhouetted against the street glow",
)

IMMERSIVE_QUALITY_PROMPTS: tuple[str, ...] = (
    "volumetric neon haze, wet asphalt reflections, shallow depth of field",
    "anamorphic lens flares, teal and magenta color grade, fine film grain",
    "hard rim light from holographic billboards, deep crushed shadows",
    "rain droplets frozen mid-air, high shutter speed, crisp micro-detail",
    "smoky atmosphere, sodium-vapor street lights, subtle chromatic aberration",
    "dusty golden backlight through broken windows, gritty texture",
)

# Director styles by display name; picking none selects one at random
DIRECTOR_STYLES: dict[str, str] = {
    "Ridley Scott": (
        "Directed in the style of Ridley Scott: dense atmospheric smoke, shafts "
        "of light cutting through rain, monumental architecture dwarfing the subject."
    ),
    "Denis Villeneuve": (
        "Directed in the style of Denis Villeneuve: vast minimalist compositions, "
        "muted monochrome palette, brutalist scale and patient stillness."
    ),
    "Wong Kar-wai": (
        "Directed in the style of Wong Kar-wai: step-printed motion blur, saturated "
        "greens and reds, intimate handheld framing through glass and reflections."
    ),
    "Michael Mann": (
        "Directed in the style of Michael Mann: digital night photography, cold "
        "blue city lights, tense professional body language."
    ),
    "Mamoru Oshii": (
        "Directed in the style of Mamoru Oshii: melancholic urban sprawl, flooded "
        "canals, philosophical stillness and cybernetic detail."
    ),
    "David Fincher": (
        "Directed in the style of David Fincher: precise locked-off framing, "
        "sickly green-yellow grade, low-key lighting and clinical detail."
    ),
}

RANDOM_DIRECTOR_LABEL = "Random director"

# Scene keys grouped by district
SCENES: dict[str, tuple[str, ...]] = {
    "night_city": (
        "Afterlife Bar",
        "Lizzie's Bar",
        "Japantown Market",
        "Corpo Plaza",
        "Watson Docks",
        "Pacifica Ruins",
        "Badlands Highway",
    ),
    "dogtown": (
        "Dogtown Black Market",
        "Stadium Checkpoint",
        "Heavy Hearts Club",
        "Abandoned Skyscraper",
    ),
}

SCENE_PROMPTS: dict[str, str] = {
    "Afterlife Bar": (
        "a dim mercenary bar built in a converted morgue, red emergency lighting, "
        "legends' names on the wall"
    ),
    "Lizzie's Bar": (
        "a pink and violet neon club with braindance booths and velvet shadows"
    ),
    "Japantown Market": (
        "a crowded night market under stacked holographic kanji signs and paper lanterns"
    ),
    "Corpo Plaza": (
        "a sterile corporate plaza of glass towers, security drones and polished marble"
    ),
    "Watson Docks": (
        "rusting container cranes over black water, flickering sodium lamps"
    ),
    "Pacifica Ruins": (
        "a half-finished resort district reclaimed by gangs, graffiti and bonfires"
    ),
    "Badlands Highway": (
        "a sun-bleached desert highway with wind turbines and the city skyline on the horizon"
    ),
    "Dogtown Black Market": (
        "makeshift stalls under military tarps selling illegal cyberware"
    ),
    "Stadium Checkpoint": (
        "a fortified gate with armed guards, floodlights and barbed wire"
    ),
    "Heavy Hearts Club": (
        "a decadent club inside a ruined luxury hotel, chandeliers and tracer lights"
    ),
}

# Missions grouped by category; flattening gives the random mission pool
MISSIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Heists",
        (
            "Infiltrating a corporate vault to steal a prototype chip",
            "Escaping with a stolen data shard while alarms blare",
        ),
    ),
    (
        "Gigs",
        (
            "Extracting a defecting netrunner under fire",
            "Delivering a package to a fixer who cannot be trusted",
            "Tracking down a cyberpsycho in the backstreets",
        ),
    ),
    (
        "Downtime",
        (
            "Sharing a quiet drink with an old friend before the storm",
            "Getting new chrome installed at a ripperdoc clinic",
        ),
    ),
)

# Canned descriptions for named companions
COMPANION_PROMPTS: dict[str, str] = {
    "Netrunner": (
        "a slender netrunner in a cooling suit with glowing neural-link cables "
        "running from the back of the neck"
    ),
    "Nomad": (
        "a weathered nomad in a dusty leather jacket with tribal markings and goggles"
    ),
    "Fixer": (
        "a sharply dressed fixer with gold cyber-eyes and a confident smirk"
    ),
    "Mercenary": (
        "a heavily chromed mercenary bodyguard with a mantis-blade arm"
    ),
}


def flattened_missions() -> list[str]:
    """Every mission option across all categories."""
    return [option for _, options in MISSIONS for option in options]


def all_scenes() -> list[str]:
    """Every scene key across all districts."""
    return [scene for scenes in SCENES.values() for scene in scenes]
