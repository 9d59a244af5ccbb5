from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app
from crane_crm.decorators import login_required, roles_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.routes import get_or_404
from crane_crm.services import customer_service
from crane_crm.services.quotation_service import get_quotations_for_customer

customer_bp = Blueprint('customer', __name__)


@customer_bp.route('/customers')
@login_required
def customer_list():
    q = request.args.get('q', '').strip()
    customers = customer_service.get_customers(q)
    return render_template('customer_list.html', customers=customers, q=q)


@customer_bp.route('/customers/new', methods=['GET', 'POST'])
@login_required
def customer_new():
    if request.method == 'POST':
        try:
            customer = customer_service.create_customer(request.form)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return render_template('customer_form.html', customer=None, values=request.form)
        flash(f'Customer {customer.customer_code} created', 'success')
        return redirect(url_for('customer.customer_detail', customer_id=customer.id))
    return render_template('customer_form.html', customer=None, values={})


@customer_bp.route('/customers/<int:customer_id>')
@login_required
def customer_detail(customer_id):
    customer = get_or_404(customer_service.get_customer_by_id, customer_id)
    quotations = get_quotations_for_customer(customer.id)
    return render_template('customer_detail.html', customer=customer, quotations=quotations)


@customer_bp.route('/customers/<int:customer_id>/edit', methods=['GET', 'POST'])
@login_required
def customer_edit(customer_id):
    customer = get_or_404(customer_service.get_customer_by_id, customer_id)
    if request.method == 'POST':
        try:
            customer_service.update_customer(customer.id, request.form)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return render_template('customer_form.html', customer=customer, values=request.form)
        flash('Customer updated', 'success')
        return redirect(url_for('customer.customer_detail', customer_id=customer.id))
    values = customer.contact_snapshot()
    values["company_name"] = customer.company_name or ""
    return render_template('customer_form.html', customer=customer, values=values)


@customer_bp.route('/customers/<int:customer_id>/delete', methods=['POST'])
@login_required
@roles_required('admin')
def customer_delete(customer_id):
    try:
        customer_service.delete_customer(customer_id)
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
        return redirect(url_for('customer.customer_detail', customer_id=customer_id))
    current_app.logger.info("[ROUTE] customer %s deleted", customer_id)
    flash('Customer deleted', 'success')
    return redirect(url_for('customer.customer_list'))
