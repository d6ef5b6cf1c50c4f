#!/usr/bin/env python3
"""
X12 EDI Command Line Tool

Parses X12 interchanges to JSON with structural validation, and generates
outbound warehouse documents (810, 855, 856, 940, 945, 947) from JSON input.

Usage:
    python main.py parse input.edi                          # Parse input.edi -> input.json
    python main.py parse input.edi output.json              # Parse to specific output file
    python main.py generate 856 asn.json --sender WH --receiver ACME
    python main.py generate 945 advice.json out.edi --profile-dir profiles --profile acme
"""

import argparse
import json
import sys
from pathlib import Path

# Try importing from installed package first, fallback to src path
try:
    from control_numbers import ControlNumberAllocator, JsonFileControlNumberStore
    from document_builders import DOCUMENT_BUILDERS
    from document_inputs import PartyId
    from edi_generator import EdiGenerator
    from edi_parser import EdiParser
    from partner_profiles import PartnerProfileManager
    from validation_service import StructuralValidator
except ImportError:
    # Add src to path for imports when not installed
    sys.path.insert(0, str(Path(__file__).parent / "src"))
    from control_numbers import ControlNumberAllocator, JsonFileControlNumberStore
    from document_builders import DOCUMENT_BUILDERS
    from document_inputs import PartyId
    from edi_generator import EdiGenerator
    from edi_parser import EdiParser
    from partner_profiles import PartnerProfileManager
    from validation_service import StructuralValidator


def parse_edi_file(input_file: str, output_file: str) -> int:
    """Parse an EDI file and save results to JSON."""

    print(f"EDI Parser - Processing {input_file}")
    print("=" * 50)

    try:
        print(f"Loading EDI file: {input_file}")
        with open(input_file, 'r') as f:
            edi_content = f.read()
        print(f"Loaded {len(edi_content)} characters")

        print("\nParsing EDI content...")
        result = EdiParser(edi_content).parse()

        print("\nParsing Results:")
        print(f"  Delimiters: element '{result.delimiters.element}', segment '{result.delimiters.segment}'")
        print(f"  Interchanges: {len(result.interchanges)}")
        for interchange in result.interchanges:
            print(f"  Interchange Control Number: {interchange.control_number}")
            print(f"  Sender ID: {interchange.sender_id}")
            print(f"  Receiver ID: {interchange.receiver_id}")
            print(f"  Functional Groups: {len(interchange.groups)}")
        for transaction in result.transactions():
            document_type = getattr(transaction.parsed, 'type', None)
            print(f"  Transaction {transaction.transaction_set_id} ({transaction.control_number}): {document_type}")

        print("\nRunning structural validation...")
        validation_result = StructuralValidator().validate(result)

        if validation_result.valid and not validation_result.warnings:
            print("EDI envelope structure is valid!")
        else:
            print(f"EDI validation found {len(validation_result.findings)} issues:")
            for i, finding in enumerate(validation_result.findings[:5]):  # Show first 5 findings
                print(f"  {i+1}. [{finding.level}] {finding.message}")
            if len(validation_result.findings) > 5:
                print(f"  ... and {len(validation_result.findings) - 5} more issues")

        print("\nGenerating JSON output...")
        json_output = result.model_dump_json(indent=2, by_alias=True)

        with open(output_file, 'w') as f:
            f.write(json_output)

        print(f"JSON output saved to: {output_file}")
        print(f"Output size: {len(json_output):,} characters")

        return 0 if validation_result.valid else 1

    except FileNotFoundError as e:
        print(f"Error: File not found: {e}")
        return 1
    except Exception as e:
        print(f"Error during EDI processing: {e}")
        import traceback
        traceback.print_exc()
        return 1


def build_generator(args, manager=None) -> EdiGenerator:
    allocator = None
    if args.control_numbers:
        allocator = ControlNumberAllocator(JsonFileControlNumberStore(args.control_numbers))
    if args.profile:
        manager = manager or PartnerProfileManager(args.profile_dir)
        return manager.build_generator(args.profile, tenant_id=args.tenant, allocator=allocator)
    return EdiGenerator(allocator=allocator)


def generate_edi_file(args) -> int:
    """Generate an outbound EDI document from a JSON input file."""

    print(f"EDI Generator - Building {args.document_type} from {args.input_file}")
    print("=" * 50)

    try:
        with open(args.input_file, 'r') as f:
            data = json.load(f)

        sender = receiver = manager = None
        if args.profile:
            manager = PartnerProfileManager(args.profile_dir)
            profile = manager.get_profile(args.profile, args.tenant)
            if profile is None:
                print(f"Error: Trading partner profile not found: {args.profile}")
                return 1
            if not profile.supports(args.document_type):
                print(f"Error: Profile {profile.name} does not exchange {args.document_type} documents")
                return 1
            sender, receiver = profile.sender, profile.receiver
        if args.sender:
            sender = PartyId(id=args.sender, qualifier=args.sender_qualifier)
        if args.receiver:
            receiver = PartyId(id=args.receiver, qualifier=args.receiver_qualifier)
        if sender is None or receiver is None:
            print("Error: --sender and --receiver are required without a trading partner profile")
            return 1

        generator = build_generator(args, manager)
        edi_output = generator.generate(args.document_type, data, sender, receiver)

        with open(args.output_file, 'w') as f:
            f.write(edi_output)

        print(f"EDI output saved to: {args.output_file}")
        print(f"Output size: {len(edi_output):,} characters")
        return 0

    except FileNotFoundError as e:
        print(f"Error: File not found: {e}")
        return 1
    except Exception as e:
        print(f"Error during EDI generation: {e}")
        import traceback
        traceback.print_exc()
        return 1


def main(argv=None):
    """Main entry point with command line argument parsing."""

    parser = argparse.ArgumentParser(
        description="Parse and generate X12 warehouse EDI documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py parse orders.edi                       # Parse orders.edi -> orders.json
  python main.py parse orders.edi output.json           # Parse to specific output
  python main.py generate 856 asn.json --sender WH01 --receiver ACME
  python main.py generate 947 adj.json adj.edi --profile-dir profiles --profile acme --tenant t1
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_cmd = subparsers.add_parser('parse', help='Parse an EDI file to JSON')
    parse_cmd.add_argument('input_file', help='Input EDI file')
    parse_cmd.add_argument('output_file', nargs='?',
                           help='Output JSON file (default: input_file.json)')

    generate_cmd = subparsers.add_parser('generate', help='Generate an EDI document from JSON')
    generate_cmd.add_argument('document_type', choices=sorted(DOCUMENT_BUILDERS),
                              help='Transaction set to generate')
    generate_cmd.add_argument('input_file', help='Input JSON document')
    generate_cmd.add_argument('output_file', nargs='?',
                              help='Output EDI file (default: input_file.edi)')
    generate_cmd.add_argument('--sender', help='Interchange sender ID')
    generate_cmd.add_argument('--sender-qualifier', default='ZZ', help='Sender ID qualifier (default: ZZ)')
    generate_cmd.add_argument('--receiver', help='Interchange receiver ID')
    generate_cmd.add_argument('--receiver-qualifier', default='ZZ', help='Receiver ID qualifier (default: ZZ)')
    generate_cmd.add_argument('--profile-dir', default='profiles', help='Trading partner profile directory')
    generate_cmd.add_argument('--profile', help='Trading partner profile name')
    generate_cmd.add_argument('--tenant', help='Tenant for tenant-specific profiles')
    generate_cmd.add_argument('--control-numbers', help='JSON file holding control number counters')

    args = parser.parse_args(argv)

    if not Path(args.input_file).exists():
        print(f"Error: Input file not found: {args.input_file}")
        return 1

    if args.command == 'parse':
        output_file = args.output_file or str(Path(args.input_file).with_suffix('.json'))
        return parse_edi_file(args.input_file, output_file)

    if not args.output_file:
        args.output_file = str(Path(args.input_file).with_suffix('.edi'))
    return generate_edi_file(args)


if __name__ == "__main__":
    exit(main())
