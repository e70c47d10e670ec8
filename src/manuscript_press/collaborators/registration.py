"""Local copyright and catalog number filing.

Neither the copyright office nor the library catalog program offers an
API for these filings, so the local services prepare the form data and the
steps to file it by hand, and return a handle in the "prepared" state.
"""

import logging
import random
import uuid
from datetime import date

from schemas.metadata import PublicationMetadata
from schemas.project import RegistrationHandle

logger = logging.getLogger(__name__)


def _full_title(metadata: PublicationMetadata) -> str:
    if metadata.subtitle:
        return f"{metadata.title}: {metadata.subtitle}"
    return metadata.title


class LocalRegistrationService:
    """Prepare a Form TX (literary work) copyright registration."""

    def __init__(self, fee: float = 65.0, nation: str = "USA"):
        self.fee = fee
        self.nation = nation

    async def register(self, metadata: PublicationMetadata) -> RegistrationHandle:
        reference = str(uuid.uuid4())
        form = {
            "form_type": "TX",
            "title_of_work": _full_title(metadata),
            "author": {
                "name": metadata.author,
                "citizenship": self.nation,
                "domicile": self.nation,
            },
            "claimant": metadata.author,
            "year_of_completion": date.today().year,
            "publication": {
                "published": True,
                "date": metadata.publication_date.isoformat(),
                "nation": self.nation,
            },
        }
        logger.info(f"Prepared copyright registration {reference} for '{metadata.title}'")
        return RegistrationHandle(
            service="copyright",
            reference=reference,
            form=form,
            instructions=[
                "1. Go to https://eco.copyright.gov and sign in",
                "2. Start a new registration for a Literary Work (Form TX)",
                f"3. Title of work: {form['title_of_work']}",
                f"4. Author and claimant: {metadata.author}",
                f"5. Pay the ${self.fee:.2f} filing fee",
                "6. Upload the print PDF as the deposit copy",
            ],
            cost=self.fee,
        )


class LocalCatalogService:
    """Prepare a preassigned control number application."""

    def __init__(self, fee: float = 0.0, seed: int | None = None):
        self.fee = fee
        self._rng = random.Random(seed)

    async def register(self, metadata: PublicationMetadata) -> RegistrationHandle:
        # Catalog numbers look like YYYY-NNNNNN
        number = f"{date.today().year}-{self._rng.randint(0, 999999):06d}"
        form = {
            "title": metadata.title,
            "author": metadata.author,
            "publisher": metadata.publisher or metadata.author,
            "publication_date": metadata.publication_date.isoformat(),
        }
        logger.info(f"Prepared catalog number application {number} for '{metadata.title}'")
        return RegistrationHandle(
            service="catalog",
            reference=number,
            form=form,
            instructions=[
                "1. Go to https://www.loc.gov/publish/pcn/",
                "2. Create a publisher account if you do not have one",
                "3. Request a Preassigned Control Number for:",
                f"   - Title: {metadata.title}",
                f"   - Author: {metadata.author}",
                f"   - Publisher: {form['publisher']}",
                f"   - Publication Date: {form['publication_date']}",
                "4. Print the number on the copyright page",
            ],
            cost=self.fee,
        )
