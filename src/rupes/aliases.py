from rupes.core.models import HashAlgorithm

ALGORITHM_ALIASES = {
    "sha256": HashAlgorithm.SHA256,
    "md5": HashAlgorithm.MD5,
    "xxh128": HashAlgorithm.XXH128,
}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ALGORITHM_HELP_TEXT = "Content digest used to confirm duplicates:\n" + "".join(
    f"  {name:<6} : {algorithm.description}\n" for name, algorithm in ALGORITHM_ALIASES.items()
)

EPILOG_TEXT = """
Examples:
  Find duplicates in the current directory
  %(prog)s

  Scan a tree recursively, skipping dotfiles, showing wasted space and timing
  %(prog)s ~/Downloads -r -e -d

  Only compare .txt files between 1KB and 10MB, using MD5
  %(prog)s ~/notes -r -f '^.+[.]txt$' -m 1K -M 10M -5

  One group per line, paths separated by commas
  %(prog)s ~/photos -r -1 ', '
"""
