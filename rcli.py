import argparse
import io
import logging
import os
import sys

from rcli_tools import (
    RcliError,
    SignFormat,
    Base64Format,
    OutputFormat,
    SECRET_FILES,
    process_csv,
    process_genpass,
    process_encode,
    process_decode,
    process_text_sign,
    process_text_verify,
    process_text_key_generate,
    process_nonce_generate,
    seal,
    open_sealed,
    urlsafe_encode,
    urlsafe_decode,
    get_content,
    write_key_bundle,
)
from rcli_tools.genpass import enabled_classes

# Set up logging configuration; RCLI_LOG_LEVEL overrides the level
LOG_LEVEL = os.environ.get('RCLI_LOG_LEVEL', 'INFO').upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO),
                    format='%(asctime)s - %(levelname)s - %(message)s')

log = logging.getLogger('rcli')

STDIN = '-'
DEFAULT_PASSWORD_LENGTH = 16


def verify_file(filename):
    if filename == STDIN or os.path.exists(filename):
        return filename
    raise argparse.ArgumentTypeError("File does not exist")


def verify_path(path):
    if os.path.isdir(path):
        return path
    raise argparse.ArgumentTypeError("Path does not exist or is not a directory")


def _enum_type(enum_cls):
    def parse(value):
        try:
            return enum_cls.parse(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e))
    parse.__name__ = enum_cls.__name__
    return parse


def _single_char(value):
    if len(value) != 1:
        raise argparse.ArgumentTypeError("delimiter must be a single character")
    return value


def _check_stdin(parser, *paths):
    if sum(1 for p in paths if p == STDIN) > 1:
        parser.error("only one of the inputs can be read from stdin ('-')")


# --- Subcommand handlers ---

def _csv_cli(args, parser):
    output = args.output or f"output.{args.format}"
    out = process_csv(args.input, output, args.format, delimiter=args.delimiter, header=args.header)
    print(f"File '{args.input}' successfully converted to '{out}'")


def _genpass_cli(args, parser):
    classes = enabled_classes(args.uppercase, args.lowercase, args.number, args.symbol)
    if classes == 0:
        parser.error("genpass requires at least one character class.")
    if args.length < classes:
        parser.error(f"--length must be at least {classes} for the selected character classes.")
    print(process_genpass(args.length, args.uppercase, args.lowercase, args.number, args.symbol))


def _b64_encode_cli(args, parser):
    print(process_encode(io.BytesIO(get_content(args.input)), args.format))


def _b64_decode_cli(args, parser):
    print(process_decode(io.BytesIO(get_content(args.input)), args.format))


def _text_sign_cli(args, parser):
    _check_stdin(parser, args.input, args.key)
    key = get_content(args.key)
    sig = process_text_sign(io.BytesIO(get_content(args.input)), key, args.format)
    print(urlsafe_encode(sig))


def _text_verify_cli(args, parser):
    _check_stdin(parser, args.input, args.key)
    key = get_content(args.key)
    sig = urlsafe_decode(args.sig)
    if process_text_verify(io.BytesIO(get_content(args.input)), key, sig, args.format):
        print("Signature verified")
    else:
        print("Signature not verified")


def _text_generate_cli(args, parser):
    bundle = process_text_key_generate(args.format)
    paths = write_key_bundle(bundle, args.output_path, secret_names=SECRET_FILES)
    print(f"{args.format} keys saved to {', '.join(repr(p) for p in paths)}")


def _text_nonce_cli(args, parser):
    paths = write_key_bundle(process_nonce_generate(), args.output_path)
    print(f"Nonce saved to '{paths[0]}'")


def _text_encrypt_cli(args, parser):
    _check_stdin(parser, args.input, args.key, args.nonce)
    key = get_content(args.key)
    nonce = get_content(args.nonce) if args.nonce else None
    print(urlsafe_encode(seal(get_content(args.input), key, nonce)))


def _text_decrypt_cli(args, parser):
    _check_stdin(parser, args.input, args.key)
    key = get_content(args.key)
    blob = urlsafe_decode(get_content(args.input))
    plaintext = open_sealed(blob, key)
    sys.stdout.buffer.write(plaintext)
    sys.stdout.buffer.flush()


# --- Parser ---

def _add_input(parser, help_text='Input file, or - for stdin'):
    parser.add_argument('-i', '--input', type=verify_file, default=STDIN, help=help_text)


def _add_sign_format(parser):
    parser.add_argument('--format', type=_enum_type(SignFormat), default=SignFormat.BLAKE3,
                        help='Signing algorithm: blake3 or ed25519, Default: blake3')


def build_parser():
    parser = argparse.ArgumentParser(prog='rcli', description="Multi-tool CLI: csv, genpass, base64 and text crypto")
    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('csv', help='Show CSV, or convert CSV to other formats')
    p.add_argument('-i', '--input', type=verify_file, required=True, help='CSV file to convert')
    p.add_argument('-o', '--output', help='Output file, Default: output.<format>')
    p.add_argument('-d', '--delimiter', type=_single_char, default=',', help='Field delimiter, Default: ,')
    p.add_argument('--header', action=argparse.BooleanOptionalAction, default=True,
                   help='Treat the first row as a header')
    p.add_argument('--format', type=_enum_type(OutputFormat), default=OutputFormat.JSON,
                   help='Output format: json or yaml, Default: json')
    p.set_defaults(func=_csv_cli)

    p = sub.add_parser('genpass', help='Generate a random password')
    p.add_argument('-l', '--length', type=int, default=DEFAULT_PASSWORD_LENGTH,
                   help=f'Password length, Default: {DEFAULT_PASSWORD_LENGTH}')
    for name in ('uppercase', 'lowercase', 'number', 'symbol'):
        p.add_argument(f'--{name}', action=argparse.BooleanOptionalAction, default=True,
                       help=f'Include {name} characters')
    p.set_defaults(func=_genpass_cli)

    b64 = sub.add_parser('base64', help='Base64 encode or decode')
    b64_sub = b64.add_subparsers(dest='b64_command', required=True)
    for name, func in (('encode', _b64_encode_cli), ('decode', _b64_decode_cli)):
        p = b64_sub.add_parser(name, help=f'Base64 {name}')
        _add_input(p)
        p.add_argument('--format', type=_enum_type(Base64Format), default=Base64Format.STANDARD,
                       help='standard or urlsafe, Default: standard')
        p.set_defaults(func=func)

    text = sub.add_parser('text', help='Sign, verify, encrypt or decrypt text')
    text_sub = text.add_subparsers(dest='text_command', required=True)

    p = text_sub.add_parser('sign', help='Sign a text with a private/session key')
    _add_input(p)
    p.add_argument('-k', '--key', type=verify_file, required=True, help='Key file (32 bytes), or - for stdin')
    _add_sign_format(p)
    p.set_defaults(func=_text_sign_cli)

    p = text_sub.add_parser('verify', help='Verify a text with a public/session key')
    _add_input(p)
    p.add_argument('-k', '--key', type=verify_file, required=True, help='Key file (32 bytes), or - for stdin')
    p.add_argument('--sig', required=True, help='Signature, URL-safe base64')
    _add_sign_format(p)
    p.set_defaults(func=_text_verify_cli)

    p = text_sub.add_parser('generate', help='Generate a random blake3 or ed25519 key')
    _add_sign_format(p)
    p.add_argument('-o', '--output-path', type=verify_path, required=True, help='Directory for the key files')
    p.set_defaults(func=_text_generate_cli)

    p = text_sub.add_parser('nonce', help='Generate a random ChaCha20-Poly1305 nonce')
    p.add_argument('-o', '--output-path', type=verify_path, required=True, help='Directory for the nonce file')
    p.set_defaults(func=_text_nonce_cli)

    p = text_sub.add_parser('encrypt', help='Encrypt text with ChaCha20-Poly1305')
    _add_input(p)
    p.add_argument('-k', '--key', type=verify_file, required=True, help='Key file (32 bytes), or - for stdin')
    p.add_argument('--nonce', type=verify_file, help='Nonce file (12 bytes); a fresh nonce is drawn if omitted')
    p.set_defaults(func=_text_encrypt_cli)

    p = text_sub.add_parser('decrypt', help='Decrypt text produced by encrypt')
    _add_input(p, 'URL-safe base64 ciphertext file, or - for stdin')
    p.add_argument('-k', '--key', type=verify_file, required=True, help='Key file (32 bytes), or - for stdin')
    p.set_defaults(func=_text_decrypt_cli)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, 'func', None):
        parser.print_help()
        return 0

    try:
        args.func(args, parser)
    except (RcliError, OSError, ValueError) as e:
        log.debug("Command '%s' failed", args.command, exc_info=True)
        parser.exit(1, f"rcli: error: {e}\n")
    return 0


if __name__ == '__main__':
    sys.exit(main())
