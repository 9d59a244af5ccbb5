import logging
from markupsafe import escape
from crane_crm import db
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.quotation_template import QuotationTemplate
from crane_crm.services import commit_or_raise
from crane_crm.services.config_service import get_default_template_config, update_default_template_config
from crane_crm.template_merge import merge_template, quotation_to_context, validate_template

logger = logging.getLogger(__name__)

# テンプレート未登録時に使う組み込み書式
BUILTIN_TEMPLATE_CONTENT = """<div class="quotation-doc">
  <header>
    <h1>{{company_name}}</h1>
    <p>{{company_address}}<br>Phone: {{company_phone}} | Email: {{company_email}}</p>
    <p>GSTIN: {{company_gst}} | PAN: {{company_pan}}</p>
  </header>
  <h2>Quotation {{quotation_number}}</h2>
  <p>Date: {{quotation_date}} &nbsp; Valid until: {{valid_until}}</p>
  <section>
    <h3>To</h3>
    <p>{{customer_name}} ({{customer_designation}})<br>{{customer_company}}<br>{{customer_address}}<br>
    {{customer_phone}} | {{customer_email}}</p>
  </section>
  <section>
    <h3>Equipment &amp; Project</h3>
    <table>
      <tr><th>Equipment</th><td>{{equipment_name}} ({{equipment_id}})</td></tr>
      <tr><th>Order type</th><td>{{order_type}}</td></tr>
      <tr><th>Duration</th><td>{{project_duration}}</td></tr>
      <tr><th>Working hours</th><td>{{working_hours}}</td></tr>
      <tr><th>Shift</th><td>{{shift_type}} / {{day_night}}</td></tr>
      <tr><th>Usage</th><td>{{usage_type}}</td></tr>
      <tr><th>Risk</th><td>{{risk_factor}}</td></tr>
      <tr><th>Site distance</th><td>{{site_distance}}</td></tr>
    </table>
  </section>
  <section>
    <h3>Charges</h3>
    <table>
      <tr><th>Base rate</th><td>{{base_rate}}</td></tr>
      <tr><th>Working cost</th><td>{{working_cost}}</td></tr>
      <tr><th>Elongation</th><td>{{elongation_cost}}</td></tr>
      <tr><th>Food &amp; accommodation</th><td>{{food_accom_cost}}</td></tr>
      <tr><th>Mobilization / demobilization</th><td>{{mob_demob_cost}}</td></tr>
      <tr><th>Risk adjustment</th><td>{{risk_adjustment}}</td></tr>
      <tr><th>Usage load factor</th><td>{{usage_load_factor}}</td></tr>
      <tr><th>Extra charges</th><td>{{extra_charges}}</td></tr>
      <tr><th>Subtotal</th><td>{{subtotal}}</td></tr>
      <tr><th>GST</th><td>{{gst_amount}} ({{gst_applicable}})</td></tr>
      <tr class="total"><th>Total</th><td>{{total_amount}}</td></tr>
    </table>
  </section>
  <section>
    <h3>Terms</h3>
    <p>Payment: {{payment_terms}}</p>
    <p>{{terms_conditions}}</p>
    <p>Validity: {{validity_period}}</p>
    <p>{{notes}}</p>
  </section>
  <footer>&copy; {{current_year}} {{company_name}}</footer>
</div>
"""


def _clean(data):
    name = (data.get("name") or "").strip()
    content = data.get("content") or ""
    if not name:
        raise ValidationError("Template name is required", field="name")
    if not content.strip():
        raise ValidationError("Template content is required", field="content")
    result = validate_template(content)
    if not result["is_valid"]:
        raise ValidationError("; ".join(result["errors"]), field="content")
    for warning in result["warnings"]:
        logger.warning("[TEMPLATE] %s (template=%s)", warning, name)
    return {
        "name": name,
        "description": (data.get("description") or "").strip() or None,
        "content": content,
    }


def get_templates():
    return QuotationTemplate.query.order_by(QuotationTemplate.name).all()


def get_template_by_id(template_id):
    template = db.session.get(QuotationTemplate, template_id)
    if template is None:
        raise NotFoundError("Template not found")
    return template


def create_template(data):
    template = QuotationTemplate(**_clean(data))
    db.session.add(template)
    commit_or_raise("creating template")
    logger.info("[TEMPLATE] created id=%s name=%s", template.id, template.name)
    return template


def update_template(template_id, data):
    template = get_template_by_id(template_id)
    for key, value in _clean(data).items():
        setattr(template, key, value)
    commit_or_raise("updating template")
    logger.info("[TEMPLATE] updated id=%s", template.id)
    return template


def delete_template(template_id):
    template = get_template_by_id(template_id)
    was_default = get_default_template_config().get("defaultTemplateId") == template.id
    db.session.delete(template)
    commit_or_raise("deleting template")
    if was_default:
        update_default_template_config(None)
    logger.info("[TEMPLATE] deleted id=%s default_cleared=%s", template_id, was_default)


def set_default_template(template_id):
    template = get_template_by_id(template_id)
    QuotationTemplate.query.filter(QuotationTemplate.id != template.id).update(
        {QuotationTemplate.is_default: False}, synchronize_session=False
    )
    template.is_default = True
    commit_or_raise("setting default template")
    update_default_template_config(template.id)
    return template


def get_default_template():
    """The configured default template, or None when it is unset or gone."""
    template_id = get_default_template_config().get("defaultTemplateId")
    if not template_id:
        return None
    template = db.session.get(QuotationTemplate, template_id)
    if template is None:
        logger.warning("[TEMPLATE] default template id=%s no longer exists", template_id)
    return template


def render_quotation(quotation, company, template=None):
    """Merged document HTML for a quotation."""
    template = template or get_default_template()
    content = template.content if template else BUILTIN_TEMPLATE_CONTENT
    return merge_template(content, quotation_to_context(quotation, company), escape=escape)
