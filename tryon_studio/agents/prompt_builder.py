"""Try-on prompt builder for the hosted image model."""

import re

from ..models import BackgroundMode, FitBand
from ..utils.description_cleaner import clean_product_name

NO_PERSON_TOKEN = "NO_PERSON_DETECTED"

BACKGROUND_INSTRUCTIONS = {
    BackgroundMode.ORIGINAL: "Keep the original background unchanged",
    BackgroundMode.PLAIN: "Replace the background with a plain white studio backdrop",
    BackgroundMode.TRANSPARENT: "Remove the background completely so only the person remains on a transparent background",
    BackgroundMode.STUDIO: "Replace the background with a professional photo studio setting",
}

FIT_INSTRUCTIONS = {
    FitBand.SLIM: "a slim, close-to-the-body fit",
    FitBand.REGULAR: "a regular, true-to-size fit",
    FitBand.RELAXED: "a relaxed fit with some room through the body",
    FitBand.OVERSIZED: "an oversized, loose fit",
}

# Phrases the model uses when it refuses because the photo has nobody in it
NO_PERSON_PATTERNS = [
    re.escape(NO_PERSON_TOKEN),
    r"\bno (?:person|people|human|body)\b",
    r"\b(?:doesn't|does not|don't|do not) (?:contain|show|include) (?:a |any )?(?:person|people|human)",
    r"\b(?:couldn't|could not|can't|cannot|unable to) (?:find|detect|identify|see) (?:a |any )?(?:person|people|human|body)",
]


def mentions_no_person(text: str | None) -> bool:
    """True if a model reply says there's no person in the photo."""
    if not text:
        return False
    return any(re.search(p, text, flags=re.IGNORECASE) for p in NO_PERSON_PATTERNS)


class TryOnPromptBuilder:
    """Builds the instruction sent alongside the person and product images.

    Image 1 is always the user's photo, image 2 the product photo.
    """

    def build(
        self,
        product_name: str | None,
        background: BackgroundMode | str = BackgroundMode.ORIGINAL,
        fit: FitBand | str | None = None,
    ) -> str:
        """Build a try-on prompt.

        Args:
            product_name: Catalog name of the product (may be empty)
            background: Background treatment for the output
            fit: Optional fit band

        Returns:
            Prompt string for the image model
        """
        cleaned = clean_product_name(product_name or "")
        item = cleaned['item_type']
        if cleaned['color']:
            item = f"{cleaned['color']} {item}"
        label = product_name.strip() if product_name and product_name.strip() else item

        if cleaned['is_accessory']:
            action = f"make them wear the {item} from the second image ({label}), placed naturally where it would be worn"
        else:
            action = f"make them wear the {item} from the second image ({label})"

        requirements = [
            "Preserve the person's face, body posture, and proportions EXACTLY from the original photo",
            "Seamlessly blend the item onto the person's body with perfect alignment",
            "Match lighting, shadows, and highlights to the person's environment",
            "Add realistic fabric wrinkles, folds, and texture that follow body contours naturally",
            "Maintain consistent color temperature and tone throughout the image",
            BACKGROUND_INSTRUCTIONS[BackgroundMode(background)],
            "Make it look like a real photograph, not a digital composite",
            "Preserve skin tone, hair, and all facial features exactly as in the original",
        ]
        if cleaned['materials']:
            requirements.insert(3, f"Render the {' and '.join(cleaned['materials'])} texture faithfully")
        if fit is not None and not cleaned['is_accessory']:
            requirements.insert(2, f"Show the {cleaned['item_type']} with {FIT_INSTRUCTIONS[FitBand(fit)]}")

        lines = "\n".join(f"- {r}" for r in requirements)
        return (
            f"Create a photorealistic virtual try-on image. Take the person from the first image "
            f"and {action}.\n\n"
            f"CRITICAL REQUIREMENTS:\n{lines}\n\n"
            f"If the first image does not contain a person, do not generate an image and reply "
            f"with exactly {NO_PERSON_TOKEN}.\n\n"
            f"The result should be indistinguishable from a real photograph of the person wearing this item."
        )
