"""
Fixed conversion rules.

Messages here are user-facing and stable; tests and clients match on them.
"""

CSV2JSON = "csv2json"
JSON2CSV = "json2csv"
MODES = (CSV2JSON, JSON2CSV)

DELIMITER = ","
QUOTE = '"'
LINE_TERMINATOR = "\n"
JSON_INDENT = 2

# plain notation for 1e-6 <= |x| < 1e21, exponent form otherwise
FLOAT_MAX_PLAIN_DIGITS = 21
FLOAT_MIN_PLAIN_POINT = -6

DOWNLOAD_FILENAMES = {
    CSV2JSON: "converted.json",
    JSON2CSV: "converted.csv",
}

# upload filename extension -> preselected mode (hint only)
EXTENSION_MODES = {
    ".csv": CSV2JSON,
    ".json": JSON2CSV,
}

UPLOAD_ENCODING_FALLBACK = "utf-8"

MSG_EMPTY_INPUT = "Please enter some data to convert"
MSG_CONVERSION_FAILED = "Conversion failed"
MSG_FILE_READ_FAILED = "Failed to read file"

MSG_CSV_TOO_SHORT = "CSV must contain at least a header row and one data row"
MSG_CSV_EMPTY_HEADER = "CSV headers cannot be empty"
MSG_CSV_ROW_WIDTH = "Row {line} has {actual} values but should have {expected} (matching headers)"

MSG_JSON_NOT_ARRAY = "Input must be an array of objects"
MSG_JSON_EMPTY = "JSON array cannot be empty"
MSG_JSON_NOT_OBJECTS = "All items in the array must be objects"
