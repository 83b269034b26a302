# WORKFLOW: Database models for the CT cannabis relational store.
# Used by: Pipeline load step, schema migration (init_db), tests
# Models represent:
# 1. ct_brands - Lab-tested registered products with cannabinoid/terpene profiles
# 2. ct_credentials - License credential counts by type and status
# 3. ct_applications - Cannabis license applications
# 4. ct_weekly_sales - Weekly retail sales
# 5. ct_tax - Monthly tax revenue
#
# Data flow: Socrata API -> Cleaning -> Record models -> Rows -> These tables
# Measurement columns hold NULL for empty and trace readings, 0 for zero readings.

from sqlalchemy import Column, DateTime, Double, Index, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Brand(Base):
    __tablename__ = "ct_brands"

    registration_number = Column(Text, primary_key=True)
    brand_name = Column(Text)
    dosage_form = Column(Text)
    branding_entity = Column(Text)
    product_image_url = Column(Text)
    product_image_desc = Column(Text)
    label_image_url = Column(Text)
    label_image_desc = Column(Text)
    lab_analysis_url = Column(Text)
    lab_analysis_desc = Column(Text)
    approval_date = Column(DateTime)

    # Cannabinoids
    tetrahydrocannabinol_thc = Column(Double)
    tetrahydrocannabinol_acid_thca = Column(Double)
    cannabidiols_cbd = Column(Double)
    cannabidiol_acid_cbda = Column(Double)

    # Terpenes and minor cannabinoids
    a_pinene = Column(Double)
    b_myrcene = Column(Double)
    b_caryophyllene = Column(Double)
    b_pinene = Column(Double)
    limonene = Column(Double)
    ocimene = Column(Double)
    linalool_lin = Column(Double)
    humulene_hum = Column(Double)
    cbg = Column(Double)
    cbg_a = Column(Double)
    cannabavarin_cbdv = Column(Double)
    cannabichromene_cbc = Column(Double)
    cannbinol_cbn = Column(Double)
    tetrahydrocannabivarin_thcv = Column(Double)
    a_bisabolol = Column(Double)
    a_phellandrene = Column(Double)
    a_terpinene = Column(Double)
    b_eudesmol = Column(Double)
    b_terpinene = Column(Double)
    fenchone = Column(Double)
    pulegol = Column(Double)
    borneol = Column(Double)
    isopulegol = Column(Double)
    carene = Column(Double)
    camphene = Column(Double)
    camphor = Column(Double)
    caryophyllene_oxide = Column(Double)
    cedrol = Column(Double)
    eucalyptol = Column(Double)
    geraniol = Column(Double)
    guaiol = Column(Double)
    geranyl_acetate = Column(Double)
    isoborneol = Column(Double)
    menthol = Column(Double)
    l_fenchone = Column(Double)
    nerol = Column(Double)
    sabinene = Column(Double)
    terpineol = Column(Double)
    terpinolene = Column(Double)
    trans_b_farnesene = Column(Double)
    valencene = Column(Double)
    a_cedrene = Column(Double)
    a_farnesene = Column(Double)
    b_farnesene = Column(Double)
    cis_nerolidol = Column(Double)
    fenchol = Column(Double)
    trans_nerolidol = Column(Double)

    market = Column(Text)
    chemotype = Column(Text)
    processing_technique = Column(Text)
    solvents_used = Column(Text)
    national_drug_code = Column(Text)

    __table_args__ = (
        Index('ct_brands_name', 'brand_name'),
        Index('ct_brands_date', 'approval_date'),
    )


class Credential(Base):
    __tablename__ = "ct_credentials"

    credential_type = Column(Text, primary_key=True)
    status = Column(Text, primary_key=True)
    count = Column(Integer)


class Application(Base):
    __tablename__ = "ct_applications"

    application_license_number = Column(Text, primary_key=True)
    application_credential_status = Column(Text)
    status_reason = Column(Text)
    sec_review_status = Column(Text)
    initial_application_type = Column(Text)
    how_selected = Column(Text)
    name = Column(Text)
    documents_url = Column(Text)

    __table_args__ = (
        Index('ct_applications_status', 'application_credential_status'),
        Index('ct_applications_type', 'initial_application_type'),
    )


class WeeklySales(Base):
    __tablename__ = "ct_weekly_sales"

    week_ending = Column(DateTime, primary_key=True)
    adult_use = Column(Double)
    medical = Column(Double)
    total = Column(Double)
    adult_use_products_sold = Column(Integer)
    medical_products_sold = Column(Integer)
    total_products_sold = Column(Integer)
    adult_use_avg_price = Column(Double)
    medical_avg_price = Column(Double)


class Tax(Base):
    __tablename__ = "ct_tax"

    period_end_date = Column(DateTime, primary_key=True)
    month = Column(Text)
    year = Column(Text)
    fiscal_year = Column(Text)
    plant_material_tax = Column(Double)
    edible_products_tax = Column(Double)
    other_cannabis_tax = Column(Double)
    total_tax = Column(Double)

    __table_args__ = (
        Index('ct_tax_fiscal_year', 'fiscal_year'),
    )
