from typing import Dict, List, Optional
import logging

from cdm import CdmFunctionalGroup, CdmInterchange, CdmTransaction, ParseResult
from edi_parser import EdiParser

logger = logging.getLogger(__name__)

class ValidationFinding:
    """Container for a single validation finding."""
    def __init__(self, level: str, code: str, message: str, location: Optional[dict] = None):
        self.level = level
        self.code = code
        self.message = message
        self.location = location or {}

    def __repr__(self) -> str:
        return f"ValidationFinding({self.level}, {self.code}, {self.message!r})"

class ValidationResult:
    """Container for validation results."""
    def __init__(self, errors: List[ValidationFinding], warnings: List[ValidationFinding]):
        self.errors = errors
        self.warnings = warnings

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def findings(self) -> List[ValidationFinding]:
        return self.errors + self.warnings

    def to_dict(self) -> Dict[str, object]:
        return {
            "valid": self.valid,
            "errors": [f.message for f in self.errors],
            "warnings": [f.message for f in self.warnings],
        }

class StructuralValidator:
    """
    Envelope completeness and trailer/count consistency over an already
    parsed tree. Purely a reporting pass: it never mutates the tree and
    never raises.
    """

    def validate(self, result: ParseResult) -> ValidationResult:
        errors: List[ValidationFinding] = []
        warnings: List[ValidationFinding] = []

        def error(code: str, message: str, **location):
            errors.append(ValidationFinding("error", code, message, location))

        def warning(code: str, message: str, **location):
            warnings.append(ValidationFinding("warning", code, message, location))

        try:
            for parse_error in result.errors:
                error("PARSE_ERROR", parse_error.message, context="DOCUMENT")

            if not result.interchanges:
                error("NO_INTERCHANGE", "No interchange envelope found (missing ISA segment)", context="DOCUMENT")

            for interchange in result.interchanges:
                self._check_interchange(interchange, error, warning)

            for segment in result.orphan_segments:
                warning(
                    "ORPHAN_SEGMENT",
                    f"Segment '{segment.segment_id}' appears outside an open envelope and was ignored",
                    segment_id=segment.segment_id,
                )
        except Exception as e:
            logger.error(f"Structural validation failed: {e}", exc_info=True)
            error("VALIDATION_ERROR", f"Validation failed: {str(e)}", context="DOCUMENT")

        logger.info(f"Validation completed: valid={not errors}, errors={len(errors)}, warnings={len(warnings)}")
        return ValidationResult(errors=errors, warnings=warnings)

    def _check_interchange(self, interchange: CdmInterchange, error, warning) -> None:
        icn = interchange.control_number
        if not interchange.sender_id:
            error("MISSING_SENDER_ID", "ISA sender ID is missing", context="Interchange", control_number=icn)
        if not interchange.receiver_id:
            error("MISSING_RECEIVER_ID", "ISA receiver ID is missing", context="Interchange", control_number=icn)
        if not interchange.groups:
            error("NO_FUNCTIONAL_GROUP", "No functional group found (missing GS segment)", context="Interchange", control_number=icn)

        trailer = interchange.trailer
        if trailer is None:
            error("UNCLOSED_INTERCHANGE", f"Interchange {icn} is not closed (missing IEA segment)", context="Interchange", control_number=icn)
        else:
            if trailer.number_of_groups != len(interchange.groups):
                warning(
                    "IEA_COUNT_MISMATCH",
                    f"IEA group count mismatch: expected {trailer.number_of_groups}, found {len(interchange.groups)}",
                    context="Interchange", control_number=icn,
                )
            if trailer.control_number != icn:
                warning(
                    "ICN_MISMATCH",
                    f"Interchange control number mismatch: ISA {icn}, IEA {trailer.control_number}",
                    context="Interchange", control_number=icn,
                )

        for group in interchange.groups:
            self._check_group(group, error, warning)

    def _check_group(self, group: CdmFunctionalGroup, error, warning) -> None:
        gcn = group.control_number
        if not group.transactions:
            error("EMPTY_FUNCTIONAL_GROUP", f"Functional group {gcn} has no transactions", context="Functional Group", control_number=gcn)

        trailer = group.trailer
        if trailer is None:
            warning("UNCLOSED_GROUP", f"Functional group {gcn} is not closed (missing GE segment)", context="Functional Group", control_number=gcn)
        else:
            if trailer.number_of_transactions != len(group.transactions):
                warning(
                    "GE_COUNT_MISMATCH",
                    f"GE transaction count mismatch: expected {trailer.number_of_transactions}, found {len(group.transactions)}",
                    context="Functional Group", control_number=gcn,
                )
            if trailer.control_number != gcn:
                warning(
                    "GROUP_CONTROL_MISMATCH",
                    f"Group control number mismatch: GS {gcn}, GE {trailer.control_number}",
                    context="Functional Group", control_number=gcn,
                )

        for transaction in group.transactions:
            self._check_transaction(transaction, warning)

    def _check_transaction(self, transaction: CdmTransaction, warning) -> None:
        tsid = transaction.transaction_set_id
        tcn = transaction.control_number
        trailer = transaction.trailer
        if trailer is None:
            warning("UNCLOSED_TRANSACTION", f"Transaction set {tsid} ({tcn}) is not closed (missing SE segment)", context="Transaction", control_number=tcn)
            return
        # +2 for ST and SE themselves
        actual_count = len(transaction.segments) + 2
        if actual_count != trailer.segment_count:
            warning(
                "SE_COUNT_MISMATCH",
                f"SE segment count mismatch in {tsid}: expected {trailer.segment_count}, found {actual_count}",
                context="Transaction", control_number=tcn,
            )
        if trailer.control_number != tcn:
            warning(
                "TRANSACTION_CONTROL_MISMATCH",
                f"Transaction control number mismatch in {tsid}: ST {tcn}, SE {trailer.control_number}",
                context="Transaction", control_number=tcn,
            )

class EDIValidationService:
    """Parse-then-validate convenience for raw partner documents."""

    def __init__(self, validator: Optional[StructuralValidator] = None):
        self.validator = validator or StructuralValidator()

    def validate_edi(self, edi_content: str, delimiter_overrides: Optional[Dict[str, str]] = None) -> ValidationResult:
        """
        Parse EDI content and report structural findings.

        Args:
            edi_content: The raw EDI document content
            delimiter_overrides: Optional delimiter characters for non-ISA input

        Returns:
            ValidationResult containing validation status and findings
        """
        logger.info("Starting structural EDI validation")
        result = EdiParser(edi_content, delimiter_overrides).parse()
        validation = self.validator.validate(result)
        if validation.findings:
            logger.warning("--- EDI STRUCTURAL VALIDATION SUMMARY: FINDINGS ---")
            for finding in validation.findings:
                logger.warning(f"  - [{finding.level}] {finding.code}: {finding.message}")
            logger.warning("--- END OF SUMMARY ---")
        return validation
