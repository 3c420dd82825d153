# estimating/schemas/risk_profile.py
from pydantic import BaseModel


class ToolRiskProfile(BaseModel):
    '''
    How risky a tool is.

    Field	Meaning
    modifies_persistent_data	writes to the database
    irreversible	cannot be undone
    deletes_data	removes data
    affects_multiple_records	touches more than one record
    require_human_auth	needs explicit human authorisation
    '''
    modifies_persistent_data: bool = False
    irreversible: bool = False
    deletes_data: bool = False
    affects_multiple_records: bool = False
    require_human_auth: bool = False
