"""
Filing profile catalog.

Knowledge packs for structured compliance intelligence. Every profile is
immutable; look them up through FILING_PROFILES or get_profile().
"""

from typing import Dict, Optional

from complipilot.models.profile import (
    ChecklistItem,
    FilingProfile,
    ProfileScope,
    ReferenceLink,
    RiskItem,
    TimelineItem,
)

ALL_STATES = ("*",)


def _scope(filing_types, states, entity_types) -> ProfileScope:
    return ProfileScope(filing_types=tuple(filing_types), states=tuple(states), entity_types=tuple(entity_types))


def _checklist(*rows) -> tuple:
    return tuple(
        ChecklistItem(id=i, label=label, description=desc, required=req, category=cat)
        for i, label, desc, req, cat in rows
    )


def _timeline(*rows) -> tuple:
    return tuple(
        TimelineItem(milestone=m, owner=owner, offset_days=offset, notes=notes)
        for m, owner, offset, notes in rows
    )


def _risks(*rows) -> tuple:
    return tuple(
        RiskItem(risk=r, severity=sev, likelihood=lik, mitigation=mit)
        for r, sev, lik, mit in rows
    )


def _links(*rows) -> tuple:
    return tuple(ReferenceLink(label=label, url=url, description=desc) for label, url, desc in rows)


# ---------------------------------------------------------------------------
# Annual report profiles
# ---------------------------------------------------------------------------

ANNUAL_REPORT_GENERIC = FilingProfile(
    slug="annual_report_generic",
    name="Annual Report (Generic)",
    scope=_scope(["Annual Report"], ALL_STATES, ["LLC", "Corporation", "S-Corporation", "C-Corporation", "LLP"]),
    checklist=_checklist(
        ("articles", "Articles of Incorporation/Organization", "Certified copy of your formation documents", True, "Formation Documents"),
        ("ein", "EIN (Employer Identification Number)", "Federal tax identification number from IRS", True, "Tax Documents"),
        ("financials", "Financial Statements", "Balance sheet and income statement for reporting period", False, "Financial Records"),
        ("operating_agreement", "Operating Agreement / Bylaws", "Current governing documents", False, "Governance"),
        ("registered_agent", "Registered Agent Information", "Current agent name and address", True, "Contact Information"),
    ),
    suggested_items=("operating_agreement", "financials"),
    timeline=_timeline(
        ("Gather Required Documents", "Business Owner", -30, "Collect formation docs, EIN, and financial records"),
        ("Review Filing Requirements", "Business Owner / Advisor", -21, "Confirm state-specific requirements and fees"),
        ("Prepare Draft Filing", "Business Owner", -14, "Complete annual report form with current information"),
        ("Internal Review", "Business Owner / Advisor", -7, "Verify accuracy of all information before submission"),
        ("Submit Annual Report", "Business Owner", -3, "File online or mail to state agency with payment"),
        ("Filing Deadline", "State Agency", 0, "Late filings may incur penalties or administrative dissolution"),
    ),
    risks=_risks(
        ("Late Filing Penalty", "Medium", "Medium", "Set calendar reminders 30 days before deadline; consider auto-renewal if available"),
        ("Administrative Dissolution", "High", "Low", "File at least 7 days early to account for processing delays"),
        ("Incorrect Information", "Medium", "Low", "Cross-reference with formation documents and previous filings"),
        ("Payment Processing Delays", "Low", "Medium", "Use electronic payment methods; confirm receipt within 48 hours"),
    ),
    links=_links(
        ("State Business Portal", "[Contact your state's Secretary of State office]", "Official filing portal for your jurisdiction"),
    ),
)

ANNUAL_REPORT_CA = FilingProfile(
    slug="annual_report_ca",
    name="Annual Report (California)",
    scope=_scope(["Annual Report"], ["California", "CA"], ["LLC", "Corporation", "S-Corporation", "C-Corporation"]),
    checklist=_checklist(
        ("articles", "Articles of Incorporation/Organization", "Original formation documents filed with California SOS", True, "Formation Documents"),
        ("ein", "EIN (Employer Identification Number)", "Federal tax ID from IRS", True, "Tax Documents"),
        ("soi", "Statement of Information (Form SI-550/SI-350)", "California-specific information statement", True, "State Requirements"),
        ("franchise_tax", "Franchise Tax Board Account", "Active FTB account in good standing", True, "Tax Compliance"),
        ("registered_agent", "California Registered Agent", "Agent with physical CA address (not PO Box)", True, "Contact Information"),
        ("operating_agreement", "Operating Agreement / Bylaws", "Current governing documents", False, "Governance"),
    ),
    suggested_items=("operating_agreement", "soi"),
    timeline=_timeline(
        ("Gather CA-Specific Documents", "Business Owner", -30, "Collect Statement of Information, FTB account info, registered agent details"),
        ("Verify FTB Account Status", "Business Owner / CPA", -21, "Ensure Franchise Tax Board account is current and in good standing"),
        ("Complete Statement of Information", "Business Owner", -14, "Fill out Form SI-550 (LLC) or SI-350 (Corp) with current data"),
        ("Review and Validate", "Business Owner / Advisor", -7, "Double-check officer/member names, addresses, and agent information"),
        ("File Online via BizFile", "Business Owner", -3, "Submit through California Secretary of State BizFile portal with $20-25 fee"),
        ("California Filing Deadline", "CA Secretary of State", 0, "Late penalty: $250 plus potential suspension of entity status"),
    ),
    risks=_risks(
        ("FTB Suspension", "High", "Medium", "Verify FTB account is current before filing; resolve any outstanding tax issues"),
        ("Late Filing Penalty ($250)", "Medium", "Medium", "File at least 1 week early; set multiple calendar reminders"),
        ("Entity Suspension", "High", "Low", "Monitor compliance calendar; consider professional registered agent service"),
        ("Incorrect Agent Address", "Medium", "Low", "Confirm agent address is physical CA location, not PO Box"),
    ),
    links=_links(
        ("California BizFile Portal", "https://bizfileonline.sos.ca.gov/", "Official California Secretary of State filing system"),
        ("Franchise Tax Board", "https://www.ftb.ca.gov/", "Verify tax account status"),
        ("CA Secretary of State Business Programs", "https://www.sos.ca.gov/business-programs/", "General business filing information"),
    ),
)

ANNUAL_REPORT_DE = FilingProfile(
    slug="annual_report_de",
    name="Annual Report (Delaware)",
    scope=_scope(["Annual Report"], ["Delaware", "DE"], ["LLC", "Corporation", "S-Corporation", "C-Corporation"]),
    checklist=_checklist(
        ("articles", "Certificate of Formation/Incorporation", "Original Delaware formation documents", True, "Formation Documents"),
        ("ein", "EIN (Employer Identification Number)", "Federal tax ID", True, "Tax Documents"),
        ("franchise_tax", "Delaware Franchise Tax Payment", "Annual franchise tax must be paid", True, "Tax Compliance"),
        ("registered_agent", "Delaware Registered Agent", "Agent with physical DE address", True, "Contact Information"),
        ("file_number", "Delaware File Number", "7-digit file number from formation", True, "State Requirements"),
    ),
    suggested_items=("franchise_tax",),
    timeline=_timeline(
        ("Review Franchise Tax Calculation", "Business Owner / CPA", -30, "Calculate franchise tax based on authorized shares or assumed par value method"),
        ("Gather Delaware File Number", "Business Owner", -21, "Locate 7-digit file number from original Certificate"),
        ("Prepare Annual Report", "Business Owner", -14, "Complete report with current officer/director information"),
        ("Calculate Total Fees", "Business Owner / CPA", -7, "Annual report fee ($50 LLC / $50+ Corp) plus franchise tax"),
        ("File Online", "Business Owner", -3, "Submit via Delaware Division of Corporations online portal"),
        ("Delaware Deadline", "DE Division of Corporations", 0, "LLC: June 1 / Corp: March 1. Late penalty: $200 + monthly interest"),
    ),
    risks=_risks(
        ("Franchise Tax Miscalculation", "Medium", "Medium", "Use Delaware tax calculator; consult CPA for complex capital structures"),
        ("Late Filing Penalty ($200 + interest)", "Medium", "Low", "File at least 2 weeks before deadline; set early reminders"),
        ("Entity Voiding", "High", "Low", "Never miss 3 consecutive years; maintain current registered agent"),
        ("Payment Processing Delay", "Low", "Medium", "Use credit card payment for instant processing; avoid checks near deadline"),
    ),
    links=_links(
        ("Delaware Division of Corporations", "https://corp.delaware.gov/", "Official filing portal and franchise tax calculator"),
    ),
)

# ---------------------------------------------------------------------------
# State tax registration profiles
# ---------------------------------------------------------------------------

STATE_TAX_REGISTRATION_GENERIC = FilingProfile(
    slug="state_tax_registration_generic",
    name="State Tax Registration (Generic)",
    scope=_scope(
        ["State Tax Registration"],
        ALL_STATES,
        ["LLC", "Corporation", "S-Corporation", "C-Corporation", "Sole Proprietorship", "Partnership"],
    ),
    checklist=_checklist(
        ("ein", "Federal EIN", "Employer Identification Number from IRS", True, "Federal Documents"),
        ("articles", "Formation Documents", "Articles of Incorporation/Organization or DBA filing", True, "Business Documents"),
        ("business_address", "Physical Business Address", "Physical location in state (not PO Box)", True, "Location Information"),
        ("business_description", "Business Activity Description", "NAICS code and detailed description of operations", True, "Business Information"),
        ("start_date", "Business Start Date", "Date of first business activity in state", True, "Business Information"),
    ),
    suggested_items=("business_description", "start_date"),
    timeline=_timeline(
        ("Determine Tax Obligations", "Business Owner / CPA", -30, "Identify sales tax, use tax, payroll tax, and income tax requirements"),
        ("Gather Registration Documents", "Business Owner", -21, "Collect EIN, formation docs, NAICS code, business location details"),
        ("Complete Registration Application", "Business Owner", -14, "Fill out state tax agency registration forms online or paper"),
        ("Review for Accuracy", "Business Owner / CPA", -7, "Verify all tax types selected, addresses correct, and signatures obtained"),
        ("Submit Registration", "Business Owner", -3, "File with state tax agency; receive confirmation number"),
        ("Registration Deadline", "State Tax Agency", 0, "Register before starting taxable activities to avoid penalties"),
    ),
    risks=_risks(
        ("Late Registration Penalty", "Medium", "High", "Register before first taxable transaction; retroactive registration may incur fines"),
        ("Incorrect Tax Type Selection", "Medium", "Medium", "Consult with CPA to identify all applicable tax obligations"),
        ("Nexus Determination Error", "High", "Low", "Review state nexus rules; consider economic nexus thresholds for remote sellers"),
        ("Ongoing Compliance Burden", "Medium", "High", "Set up quarterly/monthly filing calendar; consider using tax automation software"),
    ),
    links=_links(
        ("State Tax Agency Portal", "[Contact your state's Department of Revenue or Taxation]", "Official tax registration portal"),
    ),
)

STATE_TAX_REGISTRATION_CA = FilingProfile(
    slug="state_tax_registration_ca",
    name="State Tax Registration (California)",
    scope=_scope(
        ["State Tax Registration"],
        ["California", "CA"],
        ["LLC", "Corporation", "S-Corporation", "C-Corporation", "Sole Proprietorship", "Partnership"],
    ),
    checklist=_checklist(
        ("ein", "Federal EIN", "IRS Employer Identification Number", True, "Federal Documents"),
        ("articles", "CA Formation Documents", "Articles filed with California Secretary of State", True, "Business Documents"),
        ("cdtfa_account", "CDTFA Online Services Account", "Create account at onlineservices.cdtfa.ca.gov", True, "Registration Requirements"),
        ("naics_code", "NAICS Business Code", "6-digit code describing primary business activity", True, "Business Information"),
        ("seller_permit", "Seller's Permit Application", "Required if selling tangible goods in California", False, "Sales Tax"),
        ("use_tax", "Use Tax Registration", "Required for purchases of taxable items for business use", False, "Sales Tax"),
    ),
    suggested_items=("seller_permit", "use_tax"),
    timeline=_timeline(
        ("Determine Tax Nexus", "Business Owner / CPA", -30, "Confirm if physical presence or economic nexus exists in California"),
        ("Create CDTFA Account", "Business Owner", -21, "Register at onlineservices.cdtfa.ca.gov for online access"),
        ("Complete Registration Forms", "Business Owner", -14, "Fill CDTFA-101-DMV or online registration; select applicable tax types"),
        ("Gather Supporting Documents", "Business Owner", -10, "EIN confirmation, CA formation docs, lease or property deed"),
        ("Submit Registration", "Business Owner", -5, "File online or mail to CDTFA; processing takes 5-10 business days"),
        ("Begin Business Operations", "Business Owner", 0, "Must be registered before first taxable sale or use"),
    ),
    risks=_risks(
        ("Unregistered Sales (10% Penalty)", "High", "Medium", "Register immediately upon establishing nexus; never delay for convenience"),
        ("Security Deposit Requirement", "Medium", "Low", "New businesses may owe deposit equal to estimated quarterly tax; plan cash flow accordingly"),
        ("Incorrect Tax Type Selection", "Medium", "Medium", "Consult CPA to identify sales tax, use tax, and special district tax obligations"),
        ("Quarterly Filing Burden", "Low", "High", "Set up automated reminders; consider POS system with tax calculation features"),
    ),
    links=_links(
        ("CDTFA Online Services", "https://onlineservices.cdtfa.ca.gov/", "California Department of Tax and Fee Administration portal"),
        ("Seller's Permit Information", "https://www.cdtfa.ca.gov/taxes-and-fees/sales-and-use-tax-permit.htm", "Requirements and application process"),
    ),
)

# ---------------------------------------------------------------------------
# Federal and certification profiles
# ---------------------------------------------------------------------------

BOIR = FilingProfile(
    slug="boir",
    name="BOIR (Beneficial Ownership Information Report)",
    scope=_scope(
        ["BOIR", "BOIR (Beneficial Ownership Information Report)"],
        ALL_STATES,
        ["LLC", "Corporation", "S-Corporation", "C-Corporation"],
    ),
    checklist=_checklist(
        ("beneficial_owners", "Beneficial Owner Information", "Name, DOB, address, ID for each person owning 25%+ or exercising substantial control", True, "Ownership Data"),
        ("company_applicant", "Company Applicant Details", "Person who filed formation documents (if formed after Jan 1, 2024)", False, "Formation Data"),
        ("identification_docs", "Government-Issued ID", "Driver's license, passport, or state ID for each beneficial owner", True, "Identification"),
        ("entity_info", "Entity Information", "Legal name, DBA, EIN, formation jurisdiction, and address", True, "Business Documents"),
        ("ownership_structure", "Ownership Structure Chart", "Diagram showing ownership percentages and control relationships", False, "Supporting Documents"),
    ),
    suggested_items=("ownership_structure", "identification_docs"),
    timeline=_timeline(
        ("Identify Beneficial Owners", "Business Owner / Attorney", -30, "List all individuals with 25%+ ownership or substantial control"),
        ("Collect ID Documents", "Business Owner", -21, "Obtain scan/photo of driver's license or passport for each owner"),
        ("Gather Entity Details", "Business Owner", -14, "Compile legal name, EIN, formation date, jurisdiction, and registered address"),
        ("Complete BOIR Form", "Business Owner / Attorney", -7, "Fill FinCEN BOIR form with all beneficial owner and entity data"),
        ("Review for Accuracy", "Business Owner / Attorney", -3, "Verify all names, DOBs, addresses, and ID numbers are correct"),
        ("File with FinCEN", "Business Owner", 0, "Submit electronically via FinCEN BOSS portal; deadline varies by formation date"),
    ),
    risks=_risks(
        ("Civil Penalty (Up to $500/day)", "High", "Medium", "File before deadline; set early reminder 60 days out"),
        ("Criminal Penalties (Willful Violation)", "High", "Low", "Never intentionally omit beneficial owners; consult attorney if uncertain"),
        ("Incomplete Ownership Disclosure", "High", "Medium", "Review all ownership tiers; include indirect owners through trusts or entities"),
        ("Failure to Update Changes", "Medium", "High", "Update BOIR within 30 days of any ownership or control changes"),
    ),
    links=_links(
        ("FinCEN BOSS Portal", "https://www.fincen.gov/boi", "Official Beneficial Ownership Information Reporting portal"),
        ("BOIR Small Entity Compliance Guide", "https://www.fincen.gov/boi-faqs", "FAQs and exemptions"),
    ),
)

DBE_MBE_CERTIFICATION = FilingProfile(
    slug="dbe_mbe_certification",
    name="DBE / MBE Certification",
    scope=_scope(
        ["DBE Certification", "MBE Certification"],
        ALL_STATES,
        ["LLC", "Corporation", "S-Corporation", "C-Corporation", "Sole Proprietorship"],
    ),
    checklist=_checklist(
        ("personal_net_worth", "Personal Net Worth Statement", "Detailed financial statement showing assets, liabilities, and net worth under threshold", True, "Financial Documents"),
        ("tax_returns", "Business & Personal Tax Returns", "Last 3 years of filed tax returns (business and owner)", True, "Financial Documents"),
        ("ownership_proof", "Ownership Documentation", "Stock certificates, operating agreement, or partnership agreement showing 51%+ ownership", True, "Ownership Proof"),
        ("control_proof", "Control Documentation", "Resolutions, bylaws, or agreements showing operational control by disadvantaged owner", True, "Control Proof"),
        ("citizenship_proof", "Citizenship/Residency Proof", "Birth certificate, passport, or naturalization papers", True, "Identification"),
        ("industry_expertise", "Industry Expertise Evidence", "Resume, licenses, prior work history demonstrating sector knowledge", False, "Qualifications"),
    ),
    suggested_items=("industry_expertise", "control_proof"),
    timeline=_timeline(
        ("Review Eligibility Requirements", "Business Owner / Consultant", -90, "Confirm 51% ownership by disadvantaged individual; verify net worth limits"),
        ("Gather Financial Documents", "Business Owner / CPA", -75, "Collect 3 years tax returns, personal net worth statement, bank statements"),
        ("Compile Ownership Proof", "Business Owner / Attorney", -60, "Assemble stock certificates, operating agreement, formation documents"),
        ("Document Control", "Business Owner / Attorney", -45, "Prepare affidavits, resolutions, and organizational charts showing operational control"),
        ("Complete Certification Application", "Business Owner / Consultant", -30, "Fill state-specific DBE/MBE application with supporting documentation"),
        ("Submit Application", "Business Owner", -14, "File with state DOT or certification agency; typical review: 60-90 days"),
        ("Application Deadline", "Certification Agency", 0, "No statutory deadline, but allow 90+ days before bid submission needs"),
    ),
    risks=_risks(
        ("Application Denial (Insufficient Control)", "High", "Medium", "Document day-to-day management; avoid nominee arrangements or passive ownership"),
        ("Net Worth Exceeds Threshold", "High", "Low", "Calculate net worth carefully; exclude primary residence equity per federal rules"),
        ("Incomplete Documentation", "Medium", "High", "Use certification consultant; prepare comprehensive evidence package upfront"),
        ("Onsite Visit Findings", "Medium", "Medium", "Ensure physical business location, equipment, and staff demonstrate operational control"),
    ),
    links=_links(
        ("State DBE Certification Office", "[Contact your state Department of Transportation]", "State-specific DBE certification program"),
        ("Federal DBE Program Overview", "https://www.transportation.gov/civil-rights/disadvantaged-business-enterprise", "USDOT DBE program guidance"),
    ),
)

SAM_REGISTRATION = FilingProfile(
    slug="sam_registration",
    name="SAM.gov Registration",
    scope=_scope(
        ["SAM Registration", "SAM.gov Registration"],
        ALL_STATES,
        ["LLC", "Corporation", "S-Corporation", "C-Corporation", "Sole Proprietorship", "Partnership"],
    ),
    checklist=_checklist(
        ("ein", "EIN (Employer Identification Number)", "Federal tax ID from IRS", True, "Federal Documents"),
        ("duns", "UEI (Unique Entity Identifier)", "Formerly DUNS number; now auto-assigned by SAM.gov", True, "Federal Documents"),
        ("bank_account", "Bank Account Information", "Routing and account numbers for electronic funds transfer", True, "Financial Information"),
        ("naics_codes", "NAICS Codes (up to 10)", "6-digit codes describing your business capabilities", True, "Business Information"),
        ("psc_codes", "Product/Service Codes", "Federal PSC codes matching your offerings", False, "Business Information"),
        ("executive_info", "Executive Compensation Data", "Names and compensation for top 5 executives (if >$25k federal revenue)", False, "Financial Information"),
        ("reps_certs", "Representations & Certifications", "Annual certifications about business size, ownership, and compliance", True, "Compliance"),
    ),
    suggested_items=("psc_codes", "executive_info"),
    timeline=_timeline(
        ("Obtain EIN", "Business Owner", -45, "Apply for EIN via IRS if not already obtained"),
        ("Create SAM.gov Account", "Business Owner", -30, "Register at SAM.gov; receive UEI assignment (replaces DUNS)"),
        ("Gather Bank & Tax Info", "Business Owner / CPA", -21, "Collect bank routing/account, tax returns, and financial statements"),
        ("Select NAICS & PSC Codes", "Business Owner", -14, "Identify up to 10 NAICS codes that match capabilities; prioritize primary code"),
        ("Complete SAM Registration", "Business Owner", -7, "Fill entity profile, NAICS codes, banking info, and reps & certs"),
        ("Submit & Await Validation", "SAM.gov / IRS", 0, "Initial registration takes 7-10 days for IRS TIN validation"),
        ("Registration Active", "Business Owner", 10, "Status changes to Active; eligible to bid on federal contracts"),
    ),
    risks=_risks(
        ("TIN Validation Failure", "High", "Medium", "Verify EIN matches IRS records exactly; resolve any IRS discrepancies first"),
        ("Annual Renewal Lapse", "High", "High", "Registration expires annually; set calendar reminder 60 days before expiration"),
        ("Incorrect NAICS Code Selection", "Medium", "Medium", "Research NAICS carefully; primary code affects small business size standards"),
        ("Incomplete Reps & Certs", "Medium", "Medium", "Answer all certification questions; update annually or when circumstances change"),
    ),
    links=_links(
        ("SAM.gov Registration Portal", "https://sam.gov/", "Official System for Award Management"),
        ("NAICS Code Lookup", "https://www.census.gov/naics/", "Search and identify appropriate business codes"),
    ),
)


FILING_PROFILES: Dict[str, FilingProfile] = {
    p.slug: p
    for p in (
        ANNUAL_REPORT_GENERIC,
        ANNUAL_REPORT_CA,
        ANNUAL_REPORT_DE,
        STATE_TAX_REGISTRATION_GENERIC,
        STATE_TAX_REGISTRATION_CA,
        BOIR,
        DBE_MBE_CERTIFICATION,
        SAM_REGISTRATION,
    )
}


def get_profile(slug: str) -> Optional[FilingProfile]:
    return FILING_PROFILES.get(slug)
