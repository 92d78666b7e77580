from picsorter.core.models import HashAlgorithmName, TransferMode

HASH_ALIASES = {
    "md5": HashAlgorithmName.MD5,
    "xxh128": HashAlgorithmName.XXH128,
}

HASH_CHOICES = list(HASH_ALIASES.keys())

HASH_HELP_TEXT = (
    "Digest applied to the reduced grayscale sample:\n"
    "  md5    : MD5, 128 bit (default)\n"
    "  xxh128 : xxHash XXH3-128, 128 bit, faster\n"
    "Fingerprints from different digests are not comparable."
)

TRANSFER_ALIASES = {
    "copy": TransferMode.COPY,
    "move": TransferMode.MOVE,
}

TRANSFER_CHOICES = list(TRANSFER_ALIASES.keys())

TRANSFER_HELP_TEXT = (
    "How selected files reach the output directory:\n"
    "  copy : Leave the original in place (default)\n"
    "  move : Relocate the original into the output directory"
)

BANNER_TEXT = "PicSorter - a tool for finding duplicate images"

HINT_TEXT = """
To copy specific images into a separate directory, use:
  --move, -m        : Copy all duplicates except the first of each group
  --select-one, -s  : Copy the first image of every duplicate group
  --copy-unique, -u : Copy all images that have no duplicates
  --select-all, -a  : Copy one image per duplicate group AND all unique images
"""

EPILOG_TEXT = """
Examples:
  Report duplicate groups without touching any file
  %(prog)s ./mypictures

  Copy every duplicate except the first of each group
  %(prog)s ./mypictures ./duplicates --move

  Copy one image per duplicate group
  %(prog)s ./mypictures ./duplicates --select-one

  Copy all images that have no duplicates
  %(prog)s ./mypictures ./unique --copy-unique

  Copy one image per group plus all unique images (a de-duplicated set)
  %(prog)s ./mypictures ./selection --select-all

  Same as above, but relocate the files and use 4 fingerprinting threads
  %(prog)s ./mypictures ./selection --select-all --transfer move --workers 4

  Copy a single image into a directory
  %(prog)s --copy ./mypictures/photo.jpg:./target
"""
