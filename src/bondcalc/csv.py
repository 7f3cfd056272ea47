"""
csv.py

Contains the CSVHandler class for reading bond terms from CSV files.

Classes:
    CSVHandler - Contains methods for passing bond terms to the library in CSV files.
"""

# SPDX-License-Identifier: MIT

from bondcalc.bond import BondTermsRaw
from bondcalc.errors import InvalidInputError
from dataclasses import dataclass
import pandas as pd

# CSV column mapped to the BondTermsRaw argument it fills
COLUMNS = {
    "Face Value": "face_value",
    "Coupon Rate": "coupon_rate",
    "Market Price": "market_price",
    "Remaining Years": "remaining_years",
    "Payment Frequency": "payment_frequency",
}
OPTIONAL_COLUMNS = {"Required Yield": "required_yield"}

@dataclass
class CSVHandler:
    """
    Class which contains methods to handle CSV file input.

    The CSV must hold exactly one bond:

    Face Value,Coupon Rate,Market Price,Remaining Years,Payment Frequency,Required Yield
    1000,0.06,950,10,2,-1

    Required Yield may be omitted, left blank or set to -1 to have it solved from the market price.

    Methods:
        encode(path_to_input) -> BondTermsRaw
            Reads bond terms from a CSV input filepath.
    """

    def encode(self, path_to_input: str) -> BondTermsRaw:
        """
        Reads bond terms from a CSV input filepath.

        Args:
            path_to_input(str): The filepath for the CSV input.

        Returns:
            BondTermsRaw: The terms of the bond described by the file.
        """
        # Read the CSV file into a pandas DataFrame
        try:
            df = pd.read_csv(path_to_input, skipinitialspace=True)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise InvalidInputError(f"An error occurred reading the CSV input: {e}") from e

        df.columns = [str(col).strip() for col in df.columns]
        missing = [col for col in COLUMNS if col not in df.columns]
        if missing:
            raise InvalidInputError(f"The provided CSV file is missing required columns: {missing}")
        if df.shape[0] != 1:
            raise InvalidInputError(f"Expected exactly one bond in the CSV input, found {df.shape[0]}")

        row = df.iloc[0]
        if row[list(COLUMNS)].isnull().any(): # every required column must be filled
            raise InvalidInputError("The provided CSV file has blank required values")

        kwargs = {arg: row[col] for col, arg in COLUMNS.items()}
        for col, arg in OPTIONAL_COLUMNS.items():
            value = row.get(col, None)
            kwargs[arg] = None if value is None or pd.isna(value) else value

        return BondTermsRaw.from_input(**kwargs)
